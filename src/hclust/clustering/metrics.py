"""Pairwise metrics and cluster linkage functions."""

from __future__ import annotations

import math
from typing import Callable, Dict, Iterable, Sequence

import numpy as np


Vector = Sequence[float]
Metric = Callable[[Vector, Vector], float]
Linkage = Callable[[Sequence[int], Sequence[int], np.ndarray], float]


class ClusteringError(RuntimeError):
    """Raised when hierarchical clustering cannot be performed."""


class DimensionMismatchError(ValueError):
    """Raised when a metric requires equal-length vectors and receives otherwise."""

    def __init__(self, left: int, right: int):
        super().__init__(f"Vectors must have equal dimensions; received {left} and {right}")
        self.left = left
        self.right = right


def cosine_similarity(a: Vector, b: Vector) -> float:
    """Return the cosine similarity of two equal-dimension vectors.

    The value grows as the vectors point the same way. When used as the
    engine's distance it is still minimised, so the least similar clusters
    merge first. Zero vectors yield NaN.
    """

    left = np.asarray(a, dtype=float)
    right = np.asarray(b, dtype=float)
    if left.shape != right.shape:
        raise DimensionMismatchError(left.size, right.size)

    denominator = float(np.linalg.norm(left)) * float(np.linalg.norm(right))
    if denominator == 0.0:
        return math.nan
    return float(np.dot(left, right)) / denominator


def euclidean_distance(a: Vector, b: Vector) -> float:
    """Return the Euclidean distance over the shared prefix of ``a`` and ``b``."""

    size = min(len(a), len(b))
    left = np.asarray(a[:size], dtype=float)
    right = np.asarray(b[:size], dtype=float)
    return float(np.sqrt(np.sum((left - right) ** 2)))


def average_distance(
    set_a: Sequence[int],
    set_b: Sequence[int],
    distances: np.ndarray,
) -> float:
    """Mean of ``distances[i][j]`` over every ``i`` in ``set_a`` and ``j`` in ``set_b``."""

    block = _linkage_block(set_a, set_b, distances)
    return float(block.sum()) / len(set_a) / len(set_b)


def single_linkage(
    set_a: Sequence[int],
    set_b: Sequence[int],
    distances: np.ndarray,
) -> float:
    """Smallest distance between members of the two sets."""

    return float(_linkage_block(set_a, set_b, distances).min())


def complete_linkage(
    set_a: Sequence[int],
    set_b: Sequence[int],
    distances: np.ndarray,
) -> float:
    """Largest distance between members of the two sets."""

    return float(_linkage_block(set_a, set_b, distances).max())


def _linkage_block(
    set_a: Sequence[int],
    set_b: Sequence[int],
    distances: np.ndarray,
) -> np.ndarray:
    if not len(set_a) or not len(set_b):
        raise ValueError("Linkage requires two non-empty index sets")
    matrix = np.asarray(distances, dtype=float)
    return matrix[np.ix_(list(set_a), list(set_b))]


METRICS: Dict[str, Metric] = {
    "cosine": cosine_similarity,
    "euclidean": euclidean_distance,
}

LINKAGES: Dict[str, Linkage] = {
    "average": average_distance,
    "single": single_linkage,
    "complete": complete_linkage,
}


def resolve_metric(metric: str | Metric) -> Metric:
    """Return the pairwise metric registered under ``metric`` or the callable itself."""

    return _resolve(metric, METRICS, "metric")


def resolve_linkage(linkage: str | Linkage) -> Linkage:
    """Return the linkage registered under ``linkage`` or the callable itself."""

    return _resolve(linkage, LINKAGES, "linkage")


def _resolve(value, registry: Dict[str, Callable], label: str):
    if callable(value):
        return value
    try:
        return registry[value]
    except KeyError:
        raise ClusteringError(
            f"Unsupported {label} '{value}'. Choose one of: {_choices(registry)}."
        ) from None


def _choices(registry: Iterable[str]) -> str:
    return ", ".join(sorted(registry))


__all__ = [
    "ClusteringError",
    "DimensionMismatchError",
    "LINKAGES",
    "Linkage",
    "METRICS",
    "Metric",
    "Vector",
    "average_distance",
    "complete_linkage",
    "cosine_similarity",
    "euclidean_distance",
    "resolve_linkage",
    "resolve_metric",
    "single_linkage",
]
