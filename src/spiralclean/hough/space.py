"""
Hough accumulator storage.

A HoughSpace is a square grid of vote cells indexed [angle_bin, radius_bin].
Angles cover [0, pi) and radii cover [-max_radius, max_radius); both are
split into num_bins equal bins addressed by their centers.
"""

import numpy as np

from spiralclean.errors import OutOfRangeError


class HoughSpace:
    """Read-only view of a filled Hough accumulator."""

    def __init__(self, num_bins, max_radius, data=None):
        self.num_bins = int(num_bins)
        self.max_radius = float(max_radius)
        self.min_radius = -self.max_radius
        self.bin_size = (self.max_radius - self.min_radius) / self.num_bins

        if data is None:
            data = np.zeros((self.num_bins, self.num_bins), dtype=np.float64)
        data = np.array(data, dtype=np.float64, copy=True)
        if data.shape != (self.num_bins, self.num_bins):
            raise ValueError(
                f"Hough data must have shape ({self.num_bins}, {self.num_bins}), got {data.shape}"
            )
        self.data = data
        self.data.flags.writeable = False

    def __repr__(self):
        return f"HoughSpace(num_bins={self.num_bins}, max_radius={self.max_radius})"

    def value_at_bin(self, angle_idx, radius_idx):
        """Vote count of one cell."""
        if not (0 <= angle_idx < self.num_bins and 0 <= radius_idx < self.num_bins):
            raise OutOfRangeError(
                f"Bin ({angle_idx}, {radius_idx}) outside {self.num_bins}x{self.num_bins} Hough space"
            )
        return float(self.data[angle_idx, radius_idx])

    def angular_slice(self, start_bin, count):
        """
        Block of `count` consecutive angle bins starting at `start_bin`.

        Returns a (count, num_bins) view indexed [angle_offset, radius_bin].
        """
        if count <= 0 or start_bin < 0 or start_bin + count > self.num_bins:
            raise OutOfRangeError(
                f"Angular slice [{start_bin}, {start_bin + count}) outside [0, {self.num_bins})"
            )
        return self.data[start_bin:start_bin + count, :]

    def angle_from_bin(self, angle_bin):
        """Angle in radians at the center of a (possibly fractional) bin."""
        return (np.asarray(angle_bin, dtype=np.float64) + 0.5) * np.pi / self.num_bins

    def radius_from_bin(self, radius_bin):
        """Radius at the center of a (possibly fractional) bin."""
        return self.min_radius + (np.asarray(radius_bin, dtype=np.float64) + 0.5) * self.bin_size

    def bin_from_radius(self, radius):
        """Radius bin index of each radius; values outside the range fall outside [0, num_bins)."""
        return np.floor((np.asarray(radius, dtype=np.float64) - self.min_radius) / self.bin_size).astype(np.int64)

    def angles(self):
        """Center angle of every angle bin."""
        return self.angle_from_bin(np.arange(self.num_bins))
