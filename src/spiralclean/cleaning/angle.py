"""
Dominant-angle search in the linear Hough space.
"""

import numpy as np

from spiralclean.errors import ConfigurationError, OutOfRangeError
from spiralclean.tracer import get_tracer, trace


@trace(label="find_max_angle_bin")
def find_max_angle_bin(hough_space, num_bins_to_reduce):
    """
    Find the angle bin of the dominant line direction.

    Averages the coordinates of the num_bins_to_reduce highest cells rather
    than taking the single maximum, which is less sensitive to vote noise
    near the true peak.

    Returns:
        int angle bin index
    """
    tracer = get_tracer()

    num_bins = hough_space.num_bins
    if not 0 < num_bins_to_reduce <= num_bins * num_bins:
        raise ConfigurationError(
            f"num_bins_to_reduce must be in (0, {num_bins * num_bins}], got {num_bins_to_reduce}"
        )

    # Row-major ravel enumerates (angle, radius) pairs angle first
    order = np.argsort(hough_space.data.ravel(), kind="stable")
    top = order[-num_bins_to_reduce:]
    angle_bins, radius_bins = np.unravel_index(top, hough_space.data.shape)

    mean_bin = np.floor(np.array([angle_bins.sum(), radius_bins.sum()]) / num_bins_to_reduce)
    max_angle_bin = int(mean_bin[0])

    tracer.event(f"Max angle bin {max_angle_bin} (mean radius bin {int(mean_bin[1])})")
    return max_angle_bin


@trace(label="find_max_angle_slice")
def find_max_angle_slice(hough_space, center_bin, slice_size):
    """
    Collapse angle bins [center_bin - slice_size, center_bin + slice_size)
    into one vote per radius bin.

    Raises OutOfRangeError when the window does not fit inside the space.
    """
    num_bins = hough_space.num_bins
    if slice_size <= 0:
        raise ConfigurationError(f"slice_size must be positive, got {slice_size}")
    if center_bin - slice_size < 0 or center_bin + slice_size >= num_bins:
        raise OutOfRangeError(
            f"Angle window [{center_bin - slice_size}, {center_bin + slice_size}) "
            f"around bin {center_bin} exceeds Hough space of {num_bins} bins"
        )

    block = hough_space.angular_slice(center_bin - slice_size, 2 * slice_size)
    return block.sum(axis=0)
