"""
Arc-length transform.

Unrolls a spiral around its rotation center so that, plotted against z,
each turn becomes an approximately straight line.
"""

import numpy as np


def find_arc_length(xy, center):
    """
    Arc length r * theta of each point about the center.

    theta is atan(dy / dx), not the four-quadrant angle, so the result is
    only meaningful while points stay on one side of the center in x.
    Points with dx == 0 give the IEEE result of the division.

    Args:
        xy: (n, 2) or wider array; only the first two columns are used
        center: (x, y) of the rotation center

    Returns:
        (n,) array of arc lengths
    """
    xy = np.asarray(xy, dtype=np.float64)
    center = np.asarray(center, dtype=np.float64)

    x_offset = xy[:, 0] - center[0]
    y_offset = xy[:, 1] - center[1]

    rads = np.hypot(x_offset, y_offset)
    with np.errstate(divide="ignore", invalid="ignore"):
        thetas = np.arctan(y_offset / x_offset)

    return rads * thetas
