"""Full pairwise distance matrix construction."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

import numpy as np

from ..progress import PHASE_DISTANCES, ProgressCallback, ProgressReporter
from .metrics import Metric, Vector, cosine_similarity, resolve_metric


def extract_vectors(records: Sequence[Any], key: str | None = None) -> list[Vector]:
    """Return the vector stored under ``key`` for each record.

    Mappings are indexed with ``record[key]``; other objects are read with
    ``getattr``. Without a key the records are returned unchanged.
    """

    if not key:
        return list(records)
    return [_read_field(record, key) for record in records]


def _read_field(record: Any, key: str) -> Vector:
    if isinstance(record, Mapping):
        return record[key]
    return getattr(record, key)


def build_distance_matrix(
    records: Sequence[Any],
    metric: str | Metric = cosine_similarity,
    *,
    key: str | None = None,
    on_progress: ProgressCallback | ProgressReporter | None = None,
) -> np.ndarray:
    """Return the ``N x N`` matrix of ``metric`` applied to every ordered pair.

    Both triangles and the diagonal are computed; symmetry is not assumed.
    Exceptions raised by ``metric`` propagate and no partial matrix is
    returned. The resulting array is read-only.
    """

    metric_fn = resolve_metric(metric)
    reporter = _as_reporter(on_progress)
    vectors = extract_vectors(records, key)
    count = len(vectors)

    distances = np.zeros((count, count), dtype=float)
    for row, datum in enumerate(vectors):
        for col, other in enumerate(vectors):
            distances[row, col] = metric_fn(datum, other)
        reporter.update(PHASE_DISTANCES, (row + 1) / count)

    distances.setflags(write=False)
    return distances


def _as_reporter(
    on_progress: ProgressCallback | ProgressReporter | None,
) -> ProgressReporter:
    if isinstance(on_progress, ProgressReporter):
        return on_progress
    return ProgressReporter(on_progress)


__all__ = ["build_distance_matrix", "extract_vectors"]
