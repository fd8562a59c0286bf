"""
Point-to-line classification for the spiral cleaner.

Each candidate line lives in (z, arc length) space with the dominant Hough
angle and its own radius. Points go to the nearest line; lines left with
too few points are dropped afterwards.
"""

import numpy as np

from spiralclean.errors import DegenerateInputError
from spiralclean.models import UNASSIGNED, ClassificationResult
from spiralclean.tracer import get_tracer, trace


def hough_line_func(x, rad, theta):
    """Arc length on the line (rad, theta) at coordinate x."""
    return (rad - np.asarray(x) * np.cos(theta)) / np.sin(theta)


def assign_points_to_lines(zs, arclens, angle, radii):
    """
    Assign every point to its nearest candidate line, one candidate at a time.

    A point moves to a later line only when that line is strictly closer, so
    on equal residuals the earlier candidate keeps the point. NaN residuals
    never win.

    Yields (line_idx, labels, distances, points_per_line) after each
    candidate. The arrays are the working state and change on the next step;
    copy them to keep a snapshot.
    """
    zs = np.asarray(zs, dtype=np.float64)
    arclens = np.asarray(arclens, dtype=np.float64)
    if zs.shape != arclens.shape or zs.ndim != 1:
        raise DegenerateInputError(
            f"z and arc length arrays must be 1D with equal length, got {zs.shape} and {arclens.shape}"
        )

    num_pts = len(zs)
    labels = np.full(num_pts, UNASSIGNED, dtype=np.int64)
    distances = np.full(num_pts, np.inf, dtype=np.float64)
    points_per_line = np.zeros(len(radii), dtype=np.int64)

    for line_idx, rad in enumerate(radii):
        with np.errstate(divide="ignore", invalid="ignore"):
            dist = np.abs(hough_line_func(zs, rad, angle) - arclens)

        better = dist < distances
        previous = labels[better]
        # Unassigned points hold no count to give back
        np.subtract.at(points_per_line, previous[previous != UNASSIGNED], 1)
        points_per_line[line_idx] += int(np.count_nonzero(better))

        labels[better] = line_idx
        distances[better] = dist[better]

        yield line_idx, labels, distances, points_per_line


@trace(label="classify_points")
def classify_points(zs, arclens, angle, radii, min_points_per_line):
    """
    Classify points onto candidate lines and prune sparse lines.

    Args:
        zs: (n,) z coordinates
        arclens: (n,) arc lengths from find_arc_length
        angle: dominant Hough angle in radians, shared by all lines
        radii: candidate line radii, in processing order
        min_points_per_line: lines with fewer points are removed

    Returns:
        ClassificationResult
    """
    tracer = get_tracer()

    radii = [float(r) for r in radii]
    labels = distances = points_per_line = None
    for _, labels, distances, points_per_line in assign_points_to_lines(zs, arclens, angle, radii):
        pass

    if labels is None:
        # No candidates: every point stays unassigned
        num_pts = len(np.asarray(zs))
        labels = np.full(num_pts, UNASSIGNED, dtype=np.int64)
        distances = np.full(num_pts, np.inf, dtype=np.float64)
        points_per_line = np.zeros(0, dtype=np.int64)

    for line_idx in range(len(radii)):
        if points_per_line[line_idx] < min_points_per_line:
            members = labels == line_idx
            labels[members] = UNASSIGNED
            distances[members] = np.inf
            if points_per_line[line_idx] > 0:
                tracer.event(
                    f"Dropped line {line_idx}: {points_per_line[line_idx]} < {min_points_per_line} points"
                )

    result = ClassificationResult(labels=labels, distances=distances, num_lines=len(radii))
    tracer.event(
        f"Classified {result.num_points} points onto {len(result.surviving_lines())} lines, "
        f"{result.num_unassigned} unassigned"
    )
    return result
