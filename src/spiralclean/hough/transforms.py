"""
Hough transform builders.

Both transforms sweep every angle bin and let each observation vote for the
radius consistent with that angle. They differ only in how the radius is
computed from the data.
"""

import numpy as np

from spiralclean.hough.space import HoughSpace
from spiralclean.tracer import get_tracer, trace


class HoughTransform:
    """Base builder; subclasses supply `radius_function`."""

    def __init__(self, num_bins, max_radius):
        self.num_bins = int(num_bins)
        self.max_radius = float(max_radius)

    def radius_function(self, points, angles):
        """Return a (num_angles, num_votes) array of radii."""
        raise NotImplementedError

    def build(self, points):
        """Accumulate votes from an (n, 2) array of points into a new HoughSpace."""
        tracer = get_tracer()

        points = np.asarray(points, dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != 2:
            raise ValueError(f"Expected (n, 2) points, got shape {points.shape}")

        space = HoughSpace(self.num_bins, self.max_radius)
        votes = np.zeros((self.num_bins, self.num_bins), dtype=np.float64)

        with np.errstate(divide="ignore", invalid="ignore"):
            rads = self.radius_function(points, space.angles())

        if rads.size > 0:
            # Non-finite and far out-of-range radii land one bin past the edge
            beyond = self.max_radius + space.bin_size
            rads = np.clip(np.nan_to_num(rads, nan=beyond, posinf=beyond, neginf=-beyond), -beyond, beyond)
            radius_bins = space.bin_from_radius(rads)
            angle_bins = np.broadcast_to(np.arange(self.num_bins)[:, None], radius_bins.shape)
            valid = (radius_bins >= 0) & (radius_bins < self.num_bins)
            np.add.at(votes, (angle_bins[valid], radius_bins[valid]), 1.0)

        tracer.event(f"{type(self).__name__}: {int(votes.sum())} votes from {len(points)} points")
        return HoughSpace(self.num_bins, self.max_radius, votes)


class LinearHoughTransform(HoughTransform):
    """Straight lines in normal form: rho = x cos(theta) + y sin(theta)."""

    def radius_function(self, points, angles):
        return np.outer(np.cos(angles), points[:, 0]) + np.outer(np.sin(angles), points[:, 1])

    @trace(label="linear_hough")
    def build(self, points):
        return super().build(points)


class CircularHoughTransform(HoughTransform):
    """
    Circle centers in polar form.

    For two points on a circle the center lies on the perpendicular bisector
    of their chord. Writing the center as (rho cos(theta), rho sin(theta))
    gives one rho per angle for each chord, so true centers collect votes
    from every chord.
    """

    def __init__(self, num_bins, max_radius, row_offset=5):
        super().__init__(num_bins, max_radius)
        self.row_offset = int(row_offset)

    def radius_function(self, points, angles):
        if len(points) <= self.row_offset:
            return np.empty((len(angles), 0))

        first = points[:-self.row_offset]
        last = points[self.row_offset:]

        num = last[:, 0] ** 2 - first[:, 0] ** 2 + last[:, 1] ** 2 - first[:, 1] ** 2
        denom = 2 * (
            np.outer(np.cos(angles), last[:, 0] - first[:, 0])
            + np.outer(np.sin(angles), last[:, 1] - first[:, 1])
        )
        return num[None, :] / denom

    @trace(label="circular_hough")
    def build(self, points):
        return super().build(points)
