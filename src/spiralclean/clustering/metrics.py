"""
Distance metrics for hierarchical clustering.

Cluster metrics take (cluster_a, cluster_b, distance_matrix) where clusters
are sequences of row indices into the matrix. Triplet metrics take two
Triplet models. Both are plain callables handed to the clustering code.
"""

import numpy as np

from spiralclean.errors import ConfigurationError, DegenerateInputError


def _pair_block(lhs, rhs, d):
    if len(lhs) == 0 or len(rhs) == 0:
        raise DegenerateInputError("Cannot compare an empty cluster")
    return np.asarray(d)[np.ix_(list(lhs), list(rhs))]


def single_link_metric(lhs, rhs, d):
    """Smallest distance between any member of lhs and any member of rhs."""
    return float(_pair_block(lhs, rhs, d).min())


def complete_link_metric(lhs, rhs, d):
    """Largest distance between any member of lhs and any member of rhs."""
    return float(_pair_block(lhs, rhs, d).max())


CLUSTER_METRICS = {
    "single": single_link_metric,
    "complete": complete_link_metric,
}

# Distance from a merged cluster to any other cluster, computed from the two
# merged rows of the inter-cluster matrix (Lance-Williams form)
LINKAGE_UPDATES = {
    single_link_metric: np.minimum,
    complete_link_metric: np.maximum,
}


def get_cluster_metric(name):
    """Look up a linkage metric by name."""
    try:
        return CLUSTER_METRICS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown linkage {name!r}, expected one of {sorted(CLUSTER_METRICS)}"
        ) from None


def _distance_to_line(point, center, direction):
    offset = np.asarray(point) - np.asarray(center)
    return float(np.linalg.norm(np.cross(offset, direction)))


class SpiralTripletMetric:
    """
    Compares two triplets as pieces of one track.

    The distance is the larger of the two center-to-line distances plus
    angle_scale times the sine of the angle between the fitted directions.
    It is symmetric and zero for a triplet compared with itself.
    """

    def __init__(self, angle_scale=10.0, chunk_size=128):
        self.angle_scale = float(angle_scale)
        self.chunk_size = int(chunk_size)

    def __call__(self, lhs, rhs):
        perpendicular = max(
            _distance_to_line(rhs.center, lhs.center, lhs.direction),
            _distance_to_line(lhs.center, rhs.center, rhs.direction),
        )
        sin_angle = float(np.linalg.norm(np.cross(lhs.direction, rhs.direction)))
        return perpendicular + self.angle_scale * min(sin_angle, 1.0)

    def pairwise(self, triplets):
        """
        Full (m, m) distance matrix over a list of triplets.

        Same values as calling the metric on every pair, computed in row
        blocks of chunk_size to bound memory.
        """
        m = len(triplets)
        centers = np.array([t.center for t in triplets], dtype=np.float64).reshape(m, 3)
        directions = np.array([t.direction for t in triplets], dtype=np.float64).reshape(m, 3)

        # to_line[i, j]: distance from the center of j to the line of i
        to_line = np.empty((m, m), dtype=np.float64)
        sin_angle = np.empty((m, m), dtype=np.float64)
        for start in range(0, m, self.chunk_size):
            rows = slice(start, min(start + self.chunk_size, m))
            offsets = centers[None, :, :] - centers[rows, None, :]
            to_line[rows] = np.linalg.norm(np.cross(offsets, directions[rows, None, :]), axis=2)
            sin_angle[rows] = np.linalg.norm(np.cross(directions[rows, None, :], directions[None, :, :]), axis=2)

        d = np.maximum(to_line, to_line.T) + self.angle_scale * np.minimum(sin_angle, 1.0)
        np.fill_diagonal(d, 0.0)
        return d


def make_spiral_triplet_metric(angle_scale=10.0):
    """Build the triplet metric with the given angle weight."""
    return SpiralTripletMetric(angle_scale)


spiral_triplet_metric = make_spiral_triplet_metric()
