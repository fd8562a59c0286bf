"""
Triplet construction.

A triplet is three nearby points with a straight line fitted through them;
triplets that line up are later merged into track clusters.
"""

import numpy as np
from scipy.spatial import KDTree

from spiralclean.errors import DegenerateInputError
from spiralclean.models import Triplet
from spiralclean.tracer import get_tracer, trace


def make_triplet(xyz, indices):
    """
    Fit a line through three points of xyz.

    The direction is the leading singular vector of the centered points,
    signed so its first non-zero component is positive.
    """
    if len(indices) != 3:
        raise DegenerateInputError(f"A triplet needs exactly 3 indices, got {len(indices)}")

    pts = np.asarray(xyz, dtype=np.float64)[list(indices), :3]
    center = pts.mean(axis=0)
    centered = pts - center

    _, _, vt = np.linalg.svd(centered)
    direction = vt[0]
    nonzero = np.flatnonzero(np.abs(direction) > 1e-12)
    if len(nonzero) and direction[nonzero[0]] < 0:
        direction = -direction

    residuals = np.linalg.norm(np.cross(centered, direction), axis=1)
    error = float(np.sqrt(np.mean(residuals ** 2)))

    return Triplet(
        indices=tuple(int(i) for i in indices),
        center=tuple(float(c) for c in center),
        direction=tuple(float(c) for c in direction),
        error=error,
    )


@trace(label="generate_triplets")
def generate_triplets(xyz, num_neighbors=6, max_error=2.0):
    """
    Build triplets from every point and pairs of its nearest neighbors.

    Triplet indices are ordered by position along the fitted line.
    Duplicates with the same point set are dropped and
    triplets with fit error above max_error are discarded.

    Returns:
        list of Triplet, in order of first discovery
    """
    tracer = get_tracer()

    xyz = np.asarray(xyz, dtype=np.float64)
    if len(xyz) < 3:
        return []

    k = min(num_neighbors + 1, len(xyz))
    tree = KDTree(xyz[:, :3])
    _, neighbor_idx = tree.query(xyz[:, :3], k=k)

    seen = set()
    triplets = []
    for point_idx, row in enumerate(neighbor_idx):
        neighbors = [int(n) for n in row if n != point_idx]
        for a_pos in range(len(neighbors)):
            for b_pos in range(a_pos + 1, len(neighbors)):
                key = tuple(sorted((neighbors[a_pos], point_idx, neighbors[b_pos])))
                if key in seen:
                    continue
                seen.add(key)

                triplet = make_triplet(xyz, key)
                if triplet.error > max_error:
                    continue

                # Order members along the fitted direction
                proj = (xyz[list(key), :3] - np.asarray(triplet.center)).dot(triplet.direction)
                ordered = tuple(key[i] for i in np.argsort(proj, kind="stable"))
                triplets.append(triplet.model_copy(update={"indices": ordered}))

    tracer.event(f"Generated {len(triplets)} triplets from {len(xyz)} points")
    return triplets
