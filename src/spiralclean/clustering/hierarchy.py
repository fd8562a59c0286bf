"""
Agglomerative clustering driven by pluggable linkage metrics.
"""

import numpy as np

from spiralclean.clustering.metrics import LINKAGE_UPDATES, get_cluster_metric, make_spiral_triplet_metric
from spiralclean.clustering.triplets import generate_triplets
from spiralclean.models import ClusterResult
from spiralclean.tracer import get_tracer, trace


def _refresh_row(inter, row_min, row_arg, i):
    """Nearest later cluster of row i; ties go to the lowest column."""
    tail = inter[i, i + 1:]
    if tail.size == 0:
        row_min[i] = np.inf
        row_arg[i] = -1
        return
    j = int(np.argmin(tail))
    row_min[i] = tail[j]
    row_arg[i] = i + 1 + j


def agglomerate(distance_matrix, cluster_metric, max_distance):
    """
    Merge clusters bottom-up until no pair is within max_distance.

    Starts from singletons. Each round merges the closest pair under
    cluster_metric; the first pair in index order wins ties.

    The inter-cluster distances are kept in a matrix and only the merged
    cluster's row and column change after a merge. Metrics listed in
    LINKAGE_UPDATES derive that row from the two merged rows; any other
    metric is called once per remaining cluster.

    Args:
        distance_matrix: (n, n) symmetric array of item distances
        cluster_metric: callable(cluster_a, cluster_b, distance_matrix) -> float
        max_distance: largest linkage distance that still merges

    Returns:
        list of clusters, each a sorted list of item indices
    """
    d = np.asarray(distance_matrix, dtype=np.float64)
    n = len(d)
    clusters = {i: [i] for i in range(n)}
    update = LINKAGE_UPDATES.get(cluster_metric)

    if update is not None:
        inter = d.copy()
    else:
        inter = np.empty((n, n), dtype=np.float64)
        for i in range(n):
            for j in range(i + 1, n):
                inter[i, j] = inter[j, i] = cluster_metric([i], [j], d)
    np.fill_diagonal(inter, np.inf)

    active = np.ones(n, dtype=bool)
    row_min = np.full(n, np.inf)
    row_arg = np.full(n, -1, dtype=np.int64)
    for i in range(n):
        _refresh_row(inter, row_min, row_arg, i)

    while len(clusters) > 1:
        a = int(np.argmin(row_min))
        dist = row_min[a]
        if not np.isfinite(dist) or dist > max_distance:
            break
        b = int(row_arg[a])

        clusters[a] = sorted(clusters[a] + clusters.pop(b))

        if update is not None:
            merged = update(inter[a], inter[b])
        else:
            merged = np.full(n, np.inf)
            for j in clusters:
                if j != a:
                    merged[j] = cluster_metric(clusters[a], clusters[j], d)
        merged[a] = merged[b] = np.inf

        active[b] = False
        inter[b, :] = np.inf
        inter[:, b] = np.inf
        inter[a, :] = merged
        inter[:, a] = merged
        row_min[b] = np.inf
        row_arg[b] = -1
        _refresh_row(inter, row_min, row_arg, a)

        # Rows before a see the new column a and lose column b
        before = np.flatnonzero(active[:a])
        cand = inter[before, a]
        prev_min = row_min[before]
        prev_arg = row_arg[before]
        lost = (prev_arg == a) | (prev_arg == b)
        take = np.where(
            lost,
            cand <= prev_min,
            (cand < prev_min) | ((cand == prev_min) & (a < prev_arg)),
        )
        row_min[before[take]] = cand[take]
        row_arg[before[take]] = a
        for i in before[lost & ~take]:
            _refresh_row(inter, row_min, row_arg, int(i))

        # Rows between a and b only lose column b
        between = np.flatnonzero(active[a + 1:b]) + a + 1
        for i in between[row_arg[between] == b]:
            _refresh_row(inter, row_min, row_arg, int(i))

    return [clusters[i] for i in sorted(clusters)]


def triplet_distance_matrix(triplets, triplet_metric):
    """Pairwise triplet_metric distances between all triplets."""
    if hasattr(triplet_metric, "pairwise"):
        return triplet_metric.pairwise(triplets)

    n = len(triplets)
    d = np.zeros((n, n), dtype=np.float64)
    for i in range(n):
        for j in range(i + 1, n):
            d[i, j] = d[j, i] = triplet_metric(triplets[i], triplets[j])
    return d


@trace(label="cluster_triplets")
def cluster_triplets(xyz, config):
    """
    Group the points of one event into tracks by triplet clustering.

    Args:
        xyz: (n, 3) array of points
        config: ClusteringConfig

    Returns:
        ClusterResult; points outside every kept cluster are labelled -1
    """
    tracer = get_tracer()

    xyz = np.asarray(xyz, dtype=np.float64)
    labels = [-1] * len(xyz)

    triplets = generate_triplets(xyz, config.num_neighbors, config.max_triplet_error)
    if not triplets:
        tracer.event("No triplets found", level="WARN")
        return ClusterResult(labels=labels, clusters=[])

    triplet_metric = make_spiral_triplet_metric(config.angle_scale)
    d = triplet_distance_matrix(triplets, triplet_metric)
    triplet_clusters = agglomerate(d, get_cluster_metric(config.linkage), config.max_distance)

    point_clusters = []
    for members in triplet_clusters:
        points = sorted({idx for t in members for idx in triplets[t].indices})
        if len(points) >= config.min_cluster_size:
            point_clusters.append(points)

    # Largest cluster first so shared points go to the bigger track
    point_clusters.sort(key=lambda c: (-len(c), c[0]))
    for cluster_idx in reversed(range(len(point_clusters))):
        for point_idx in point_clusters[cluster_idx]:
            labels[point_idx] = cluster_idx

    tracer.event(f"Found {len(point_clusters)} clusters from {len(triplets)} triplets")
    return ClusterResult(labels=labels, clusters=point_clusters)
