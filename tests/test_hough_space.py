"""Tests for the Hough accumulator and its transforms."""

import numpy as np
import pytest

from spiralclean.errors import OutOfRangeError
from spiralclean.hough.space import HoughSpace
from spiralclean.hough.transforms import CircularHoughTransform, LinearHoughTransform


class TestHoughSpace:
    """Tests for HoughSpace indexing and bin conversions."""

    def test_empty_space_is_zero(self):
        space = HoughSpace(8, 4.0)
        assert space.data.shape == (8, 8)
        assert space.data.sum() == 0

    def test_value_at_bin(self, hough_space_factory):
        space = hough_space_factory(np.arange(16).reshape(4, 4))
        assert space.value_at_bin(2, 3) == 11.0

    def test_value_at_bin_out_of_range(self, hough_space_factory):
        space = hough_space_factory(np.zeros((4, 4)))
        with pytest.raises(OutOfRangeError):
            space.value_at_bin(4, 0)

    def test_data_is_read_only_copy(self):
        votes = np.ones((3, 3))
        space = HoughSpace(3, 1.0, votes)
        votes[0, 0] = 5
        assert space.value_at_bin(0, 0) == 1.0
        with pytest.raises(ValueError):
            space.data[0, 0] = 2

    def test_wrong_shape_rejected(self):
        with pytest.raises(ValueError):
            HoughSpace(4, 1.0, np.zeros((4, 3)))

    def test_angular_slice_shape(self, hough_space_factory):
        space = hough_space_factory(np.arange(100).reshape(10, 10))
        block = space.angular_slice(3, 4)
        assert block.shape == (4, 10)
        assert block[0, 0] == 30

    @pytest.mark.parametrize("start,count", [(-1, 2), (8, 3), (0, 0), (10, 1)])
    def test_angular_slice_bounds(self, hough_space_factory, start, count):
        space = hough_space_factory(np.zeros((10, 10)))
        with pytest.raises(OutOfRangeError):
            space.angular_slice(start, count)

    def test_angle_bin_centers(self):
        space = HoughSpace(4, 1.0)
        assert space.angle_from_bin(0) == pytest.approx(np.pi / 8)
        assert space.angle_from_bin(3) == pytest.approx(7 * np.pi / 8)

    def test_radius_bins_round_trip(self):
        space = HoughSpace(10, 5.0)
        centers = space.radius_from_bin(np.arange(10))
        assert centers[0] == pytest.approx(-4.5)
        assert centers[-1] == pytest.approx(4.5)
        assert list(space.bin_from_radius(centers)) == list(range(10))

    def test_fractional_radius_bin(self):
        space = HoughSpace(10, 5.0)
        assert space.radius_from_bin(4.5) == pytest.approx(0.0)


class TestLinearHough:
    """Tests for the linear Hough transform."""

    def test_single_point_votes_once_per_angle(self):
        transform = LinearHoughTransform(20, 10.0)
        space = transform.build(np.array([[1.0, 1.0]]))
        assert space.data.sum() == 20
        assert np.all(space.data.sum(axis=1) == 1)

    def test_out_of_range_votes_dropped(self):
        transform = LinearHoughTransform(20, 10.0)
        space = transform.build(np.array([[1000.0, 0.0]]))
        assert space.data.sum() == 0

    def test_horizontal_line_peak(self):
        # y = 3 has normal angle pi/2 and radius 3
        xs = np.linspace(-5, 5, 50)
        points = np.column_stack((xs, np.full_like(xs, 3.0)))
        transform = LinearHoughTransform(90, 10.0)
        space = transform.build(points)

        angle_bin, radius_bin = np.unravel_index(np.argmax(space.data), space.data.shape)
        assert space.angle_from_bin(angle_bin) == pytest.approx(np.pi / 2, abs=np.pi / 90)
        assert space.radius_from_bin(radius_bin) == pytest.approx(3.0, abs=space.bin_size)

    def test_bad_shape_rejected(self):
        with pytest.raises(ValueError):
            LinearHoughTransform(10, 1.0).build(np.zeros((5, 3)))


class TestCircularHough:
    """Tests for the circular Hough transform."""

    def test_center_found(self):
        center = np.array([30.0, 40.0])
        t = np.linspace(0, 2 * np.pi, 60, endpoint=False)
        points = center + 20.0 * np.column_stack((np.cos(t), np.sin(t)))

        transform = CircularHoughTransform(180, 100.0, row_offset=5)
        space = transform.build(points)

        angle_bin, radius_bin = np.unravel_index(np.argmax(space.data), space.data.shape)
        angle = space.angle_from_bin(angle_bin)
        rad = space.radius_from_bin(radius_bin)
        found = np.array([rad * np.cos(angle), rad * np.sin(angle)])

        assert np.linalg.norm(found - center) < 5.0

    def test_too_few_points_gives_empty_space(self):
        transform = CircularHoughTransform(10, 10.0, row_offset=5)
        space = transform.build(np.zeros((5, 2)))
        assert space.data.sum() == 0
