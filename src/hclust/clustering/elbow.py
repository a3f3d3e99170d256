"""Within-cluster variance and elbow detection for choosing a cluster count."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Sequence, Tuple

import numpy as np

from .metrics import euclidean_distance

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .agglomerative import ClusteringResult


MIN_ELBOW_POINTS = 3


@dataclass(frozen=True, slots=True)
class ElbowSelection:
    """Recommended cluster count with the variance curve it was derived from."""

    k: int
    variances: Tuple[float, ...]

    def to_dict(self) -> dict[str, object]:
        return {"k": self.k, "variances": list(self.variances)}


def cluster_variance(indexes: Sequence[int], distances: np.ndarray) -> float:
    """Mean pairwise distance between the members of one cluster.

    Clusters with fewer than two members have zero variance.
    """

    if len(indexes) <= 1:
        return 0.0

    total = 0.0
    count = 0
    for position, first in enumerate(indexes):
        for second in indexes[position + 1 :]:
            total += float(distances[first][second])
            count += 1
    return total / count


def within_cluster_variance(
    partitions: Sequence[Sequence[Sequence[int]]],
    distances: np.ndarray,
    k: int,
) -> float | None:
    """Sum of :func:`cluster_variance` over the clusters present at ``K = k``.

    Returns ``None`` when ``k`` lies outside ``1..N``. At ``k == N`` every
    cluster is a singleton and the result is ``0.0``.
    """

    record_count = len(partitions) - 1
    if k < 1 or k > record_count:
        return None
    if k == record_count:
        return 0.0

    return sum(cluster_variance(cluster, distances) for cluster in partitions[k])


def variance_curve(
    partitions: Sequence[Sequence[Sequence[int]]],
    distances: np.ndarray,
) -> List[float]:
    """Within-cluster variance for every ``K`` from 1 to ``N``."""

    return [
        within_cluster_variance(partitions, distances, k)
        for k in range(1, len(partitions))
    ]


def find_elbow_point(variances: Sequence[float]) -> int:
    """Return the 1-based ``K`` farthest from the chord joining the curve's endpoints.

    Ties keep the smallest ``K``. Curves with fewer than three points have no
    interior point and yield ``1``.
    """

    n_points = len(variances)
    if n_points < MIN_ELBOW_POINTS:
        return 1

    first_x, first_y = 1.0, float(variances[0])
    last_x, last_y = float(n_points), float(variances[-1])
    chord = euclidean_distance((first_x, first_y), (last_x, last_y))

    max_distance = 0.0
    elbow = 1
    for k in range(2, n_points + 1):
        y = float(variances[k - 1])
        distance = abs(
            (last_y - first_y) * k
            - (last_x - first_x) * y
            + last_x * first_y
            - last_y * first_x
        ) / chord
        if distance > max_distance:
            max_distance = distance
            elbow = k

    return elbow


def select_cluster_count(result: "ClusteringResult") -> ElbowSelection:
    """Choose ``K`` for a clustering result with the variance elbow heuristic.

    An empty result has no valid cluster count and selects ``k = 0``.
    """

    if result.record_count == 0:
        return ElbowSelection(k=0, variances=())

    variances = variance_curve(result.partitions, result.distances)
    return ElbowSelection(k=find_elbow_point(variances), variances=tuple(variances))


__all__ = [
    "ElbowSelection",
    "MIN_ELBOW_POINTS",
    "cluster_variance",
    "find_elbow_point",
    "select_cluster_count",
    "variance_curve",
    "within_cluster_variance",
]
