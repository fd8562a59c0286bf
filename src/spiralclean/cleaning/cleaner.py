"""
Hough spiral cleaner.

Splits the points of one spiralling track into line segments in
(z, arc length) space:

    arc length -> linear Hough space -> dominant angle bin
    -> angle slice -> radius peaks -> point classification
"""

import numpy as np

from spiralclean.cleaning.angle import find_max_angle_bin, find_max_angle_slice
from spiralclean.cleaning.arclength import find_arc_length
from spiralclean.cleaning.classify import classify_points
from spiralclean.cleaning.radius import find_peak_radius_bins
from spiralclean.config import CleanerConfig, validate_config
from spiralclean.errors import DegenerateInputError
from spiralclean.hough.transforms import CircularHoughTransform, LinearHoughTransform
from spiralclean.models import SpiralCleanerResult
from spiralclean.tracer import get_tracer, trace


class HoughSpiralCleaner:
    """
    Configured cleaner; holds no per-event state.

    The configuration is validated here, so a bad setting fails before any
    event is processed. One instance can serve any number of events.
    """

    def __init__(self, config=None):
        config = config or CleanerConfig()
        validate_config(config)

        self.num_angle_bins_to_reduce = config.num_angle_bins_to_reduce
        self.hough_space_slice_size = config.hough_space_slice_size
        self.peak_width = config.peak_width
        self.min_points_per_line = config.min_points_per_line
        self.num_peaks = config.num_peaks

        self.lin_hough = LinearHoughTransform(
            config.linear_hough.num_bins, config.linear_hough.max_radius
        )
        self.circ_hough = CircularHoughTransform(
            config.circular_hough.num_bins,
            config.circular_hough.max_radius,
            config.circular_hough.row_offset,
        )

    def find_arc_length(self, xy, center):
        return find_arc_length(xy, center)

    def find_hough_space(self, zs, arclens):
        """Linear Hough space of the (z, arc length) points."""
        zs = np.asarray(zs, dtype=np.float64)
        arclens = np.asarray(arclens, dtype=np.float64)
        if zs.shape != arclens.shape:
            raise DegenerateInputError(
                f"z and arc length arrays differ in shape: {zs.shape} vs {arclens.shape}"
            )
        return self.lin_hough.build(np.column_stack((zs, arclens)))

    def find_circle_hough_space(self, xy):
        """Circular Hough space of the (x, y) points, for center searches."""
        return self.circ_hough.build(np.asarray(xy, dtype=np.float64)[:, :2])

    def find_max_angle_bin(self, hough_space):
        return find_max_angle_bin(hough_space, self.num_angle_bins_to_reduce)

    def find_max_angle_slice(self, hough_space, max_angle_bin):
        return find_max_angle_slice(hough_space, max_angle_bin, self.hough_space_slice_size)

    def find_peak_radius_bins(self, hough_slice):
        return find_peak_radius_bins(hough_slice, self.peak_width, self.num_peaks)

    def classify_points(self, xyz, arclens, max_angle, radii):
        xyz = np.asarray(xyz, dtype=np.float64)
        return classify_points(xyz[:, 2], arclens, max_angle, radii, self.min_points_per_line)

    @trace(label="process_event")
    def process_event(self, xyz, center):
        """
        Run the whole chain on one event.

        Args:
            xyz: (n, 3) array of point coordinates
            center: (x, y) rotation center of the spiral

        Returns:
            SpiralCleanerResult

        Raises:
            SpiralCleanerError subclasses; nothing is returned partially.
        """
        tracer = get_tracer()

        xyz = np.asarray(xyz, dtype=np.float64)
        if xyz.ndim != 2 or xyz.shape[1] < 3:
            raise DegenerateInputError(f"Expected (n, 3) points, got shape {xyz.shape}")
        if len(xyz) == 0:
            raise DegenerateInputError("Event has no points")

        arclens = self.find_arc_length(xyz[:, :2], center)
        hough_space = self.find_hough_space(xyz[:, 2], arclens)

        max_angle_bin = self.find_max_angle_bin(hough_space)
        max_angle = float(hough_space.angle_from_bin(max_angle_bin))
        hough_slice = self.find_max_angle_slice(hough_space, max_angle_bin)

        radius_bins = self.find_peak_radius_bins(hough_slice)
        radii = [float(r) for r in hough_space.radius_from_bin(radius_bins)]

        classification = self.classify_points(xyz, arclens, max_angle, radii)

        tracer.event(f"Event cleaned: angle={max_angle:.4f} rad, {len(radii)} candidate lines")

        return SpiralCleanerResult(
            classification=classification,
            arclens=arclens,
            max_angle_bin=max_angle_bin,
            max_angle=max_angle,
            radius_bins=radius_bins,
            radii=radii,
            hough_space=hough_space,
        )
