"""Tests for the arc-length, angle and radius stages of the cleaner."""

import numpy as np
import pytest

from spiralclean.cleaning.angle import find_max_angle_bin, find_max_angle_slice
from spiralclean.cleaning.arclength import find_arc_length
from spiralclean.cleaning.radius import find_peak_radius_bins, refine_peak_centroid
from spiralclean.errors import ConfigurationError, NoPeakError, OutOfRangeError
from spiralclean.hough.peaks import find_peak_locations


class TestArcLength:
    """Tests for the arc-length transform."""

    def test_first_quadrant(self):
        arclens = find_arc_length(np.array([[1.0, 1.0]]), (0.0, 0.0))
        assert arclens[0] == pytest.approx(np.sqrt(2) * np.pi / 4)

    def test_uses_center_offset(self):
        arclens = find_arc_length(np.array([[2.0, 1.0], [1.0, 2.0]]), (1.0, 1.0))
        assert arclens[0] == pytest.approx(0.0)
        assert arclens[1] == pytest.approx(np.pi / 2)

    def test_not_four_quadrant(self):
        # atan(dy/dx) folds the left half-plane onto the right one
        arclens = find_arc_length(np.array([[-1.0, 1.0]]), (0.0, 0.0))
        assert arclens[0] == pytest.approx(-np.sqrt(2) * np.pi / 4)

    def test_ignores_extra_columns(self):
        xyz = np.array([[3.0, 0.0, 99.0]])
        assert find_arc_length(xyz, (0.0, 0.0))[0] == pytest.approx(0.0)

    def test_recovers_arc_length_on_circle(self, spiral_event):
        arclens = find_arc_length(spiral_event, (0.0, 0.0))
        expected = 0.1 * spiral_event[:, 2] + np.repeat([10.0, 60.0], 100)
        assert np.allclose(arclens, expected)


class TestMaxAngleBin:
    """Tests for the dominant-angle search."""

    def test_single_hot_cell(self, hough_space_factory):
        data = np.zeros((10, 10))
        data[7, 3] = 5
        assert find_max_angle_bin(hough_space_factory(data), 1) == 7

    def test_mean_of_top_bins(self, hough_space_factory):
        data = np.zeros((10, 10))
        data[4, 1] = 5
        data[5, 2] = 6
        data[6, 3] = 7
        assert find_max_angle_bin(hough_space_factory(data), 3) == 5

    def test_mean_is_floored(self, hough_space_factory):
        data = np.zeros((10, 10))
        data[4, 1] = 5
        data[5, 2] = 6
        assert find_max_angle_bin(hough_space_factory(data), 2) == 4

    def test_ties_favor_later_cells(self, hough_space_factory):
        # Stable ascending sort leaves the last enumerated cells on top
        assert find_max_angle_bin(hough_space_factory(np.zeros((10, 10))), 1) == 9

    @pytest.mark.parametrize("k", [0, -1, 101])
    def test_invalid_count(self, hough_space_factory, k):
        with pytest.raises(ConfigurationError):
            find_max_angle_bin(hough_space_factory(np.zeros((10, 10))), k)


class TestMaxAngleSlice:
    """Tests for the angular slice reduction."""

    def test_sums_window(self, hough_space_factory):
        data = np.arange(100, dtype=float).reshape(10, 10)
        profile = find_max_angle_slice(hough_space_factory(data), 5, 2)
        assert profile.shape == (10,)
        assert np.allclose(profile, data[3:7].sum(axis=0))

    def test_window_at_upper_edge_rejected(self, hough_space_factory):
        with pytest.raises(OutOfRangeError):
            find_max_angle_slice(hough_space_factory(np.zeros((10, 10))), 8, 2)

    def test_window_below_zero_rejected(self, hough_space_factory):
        with pytest.raises(OutOfRangeError):
            find_max_angle_slice(hough_space_factory(np.zeros((10, 10))), 1, 2)

    def test_largest_valid_center(self, hough_space_factory):
        profile = find_max_angle_slice(hough_space_factory(np.ones((10, 10))), 7, 2)
        assert np.allclose(profile, 4.0)


class TestPeakLocations:
    """Tests for the peak-location primitive."""

    def test_ordered_by_height(self):
        assert find_peak_locations([0, 3, 0, 7, 0, 5, 0], 3) == [3, 5, 1]

    def test_equal_heights_keep_position_order(self):
        assert find_peak_locations([0, 0, 5, 0, 0, 1, 0, 0, 5, 0], 3) == [2, 8, 5]

    def test_edges_can_be_peaks(self):
        assert find_peak_locations([4, 1, 0, 1, 6], 2) == [4, 0]

    def test_limits_count(self):
        assert find_peak_locations([0, 3, 0, 7, 0, 5, 0], 1) == [3]

    def test_flat_zero_profile_has_no_peaks(self):
        assert find_peak_locations(np.zeros(10), 2) == []


class TestPeakRadiusBins:
    """Tests for radius peak refinement."""

    def test_two_peak_centroids(self):
        profile = np.array([0, 0, 5, 0, 0, 1, 0, 0, 5, 0], dtype=float)
        centroids = find_peak_radius_bins(profile, peak_width=1)
        assert centroids == pytest.approx([2.0, 8.0])

    def test_num_peaks_configurable(self):
        profile = np.array([0, 0, 5, 0, 0, 1, 0, 0, 5, 0], dtype=float)
        centroids = find_peak_radius_bins(profile, peak_width=1, num_peaks=3)
        assert centroids == pytest.approx([2.0, 8.0, 5.0])

    def test_upper_window_clamped_to_end(self):
        profile = np.array([0, 0, 0, 0, 0, 0, 0, 0, 2, 4], dtype=float)
        assert refine_peak_centroid(profile, 9, 3) == pytest.approx(52.0 / 6.0)

    def test_lower_window_clamped_to_start(self):
        profile = np.array([4, 2, 0, 0, 0, 0], dtype=float)
        assert refine_peak_centroid(profile, 0, 3) == pytest.approx(2.0 / 6.0)

    def test_weighted_centroid(self):
        profile = np.array([0, 1, 3, 0, 0], dtype=float)
        assert refine_peak_centroid(profile, 2, 1) == pytest.approx((1 * 1 + 2 * 3) / 4.0)

    def test_zero_window_reports_no_peak(self):
        with pytest.raises(NoPeakError) as excinfo:
            refine_peak_centroid(np.zeros(10), 4, 1)
        assert excinfo.value.first_bin == 3
        assert excinfo.value.last_bin == 5

    def test_position_outside_profile(self):
        with pytest.raises(OutOfRangeError):
            refine_peak_centroid(np.ones(5), 5, 1)

    def test_empty_profile_has_no_candidates(self):
        assert find_peak_radius_bins(np.zeros(20), peak_width=2) == []
