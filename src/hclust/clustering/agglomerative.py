"""Agglomerative hierarchical clustering with a full per-K partition table."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Tuple

import numpy as np
import pandas as pd

from ..progress import PHASE_MERGES, ProgressCallback, ProgressReporter
from .matrix import build_distance_matrix
from .metrics import (
    ClusteringError,
    Linkage,
    Metric,
    resolve_linkage,
    resolve_metric,
)


logger = logging.getLogger(__name__)

Partition = Tuple[Tuple[int, ...], ...]


class ClusteringCancelled(ClusteringError):
    """Raised when a clustering run is stopped through ``should_stop``."""


@dataclass(slots=True)
class ClusteringParameters:
    """Configuration for an agglomerative clustering run."""

    metric: str | Metric = "cosine"
    linkage: str | Linkage = "average"
    key: str | None = None
    on_progress: ProgressCallback | None = None
    should_stop: Callable[[], bool] | None = None


@dataclass(frozen=True, slots=True)
class Cluster:
    """Node of the dendrogram.

    Singletons have no children and a height of zero. Internal nodes own
    exactly two children and record the linkage value at which they formed.
    """

    indexes: Tuple[int, ...]
    height: float = 0.0
    children: Tuple["Cluster", ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "indexes", tuple(int(index) for index in self.indexes))
        object.__setattr__(self, "children", tuple(self.children))
        if len(self.children) not in (0, 2):
            raise ValueError("A cluster must have either zero or two children")

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def size(self) -> int:
        return len(self.indexes)

    @property
    def merge_count(self) -> int:
        """Number of internal nodes in the subtree rooted at this cluster."""

        return sum(1 for node in self.iter_nodes() if not node.is_leaf)

    def iter_nodes(self) -> Iterator["Cluster"]:
        """Yield every node of the subtree in post-order (children first)."""

        stack: List[Tuple[Cluster, bool]] = [(self, False)]
        while stack:
            node, expanded = stack.pop()
            if expanded or node.is_leaf:
                yield node
                continue
            stack.append((node, True))
            for child in reversed(node.children):
                stack.append((child, False))


@dataclass(frozen=True, slots=True)
class MergeStep:
    """One merge of the run, using stable node identifiers.

    Leaves are numbered ``0..N-1`` by record position and the node created
    by merge ``step`` is numbered ``N + step - 1``.
    """

    step: int
    left: int
    right: int
    node: int
    height: float
    size: int

    def to_record(self) -> Dict[str, object]:
        return {
            "step": self.step,
            "left": self.left,
            "right": self.right,
            "node": self.node,
            "height": self.height,
            "size": self.size,
        }


class PartitionTable(Sequence):
    """Live clusters for every cluster count ``K``.

    ``table[K]`` holds the index tuples present when exactly ``K`` clusters
    existed. Entry zero is always empty, so a table over ``N`` records has
    ``N + 1`` entries.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Sequence[Sequence[Sequence[int]]]) -> None:
        self._entries: Tuple[Partition, ...] = tuple(
            tuple(tuple(int(index) for index in cluster) for cluster in partition)
            for partition in entries
        )

    @classmethod
    def from_snapshots(cls, snapshots: Sequence[Partition]) -> "PartitionTable":
        """Build a table from snapshots taken while merging (finest first)."""

        return cls([(), *reversed(snapshots)])

    def __getitem__(self, k):
        return self._entries[k]

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PartitionTable):
            return self._entries == other._entries
        if isinstance(other, Sequence):
            return self._entries == PartitionTable(other)._entries
        return NotImplemented

    def __repr__(self) -> str:
        return f"PartitionTable(record_count={self.record_count})"

    @property
    def record_count(self) -> int:
        return len(self._entries) - 1

    def labels(self, k: int) -> List[int]:
        """Return a 1-based cluster label for every record at ``K = k``.

        Labels are ordered by the smallest record index in each cluster.
        """

        if not 1 <= k <= self.record_count:
            raise ValueError(f"k must be between 1 and {self.record_count}; received {k}")

        labels = [0] * self.record_count
        ordered = sorted(self._entries[k], key=min)
        for label, cluster in enumerate(ordered, start=1):
            for index in cluster:
                labels[index] = label
        return labels


@dataclass(frozen=True, slots=True, eq=False)
class ClusteringResult:
    """Structured result of an agglomerative clustering run."""

    root: Cluster
    distances: np.ndarray
    partitions: PartitionTable
    merges: Tuple[MergeStep, ...] = ()

    @property
    def order(self) -> Tuple[int, ...]:
        """Leaf order of the dendrogram; related records sit next to each other."""

        return self.root.indexes

    @property
    def record_count(self) -> int:
        return self.partitions.record_count

    def linkage_matrix(self) -> np.ndarray:
        """Return the merges as an ``(N - 1, 4)`` array of ``left, right, height, size``."""

        if not self.merges:
            return np.empty((0, 4), dtype=float)
        return np.array(
            [[merge.left, merge.right, merge.height, merge.size] for merge in self.merges],
            dtype=float,
        )

    def merge_records(self) -> List[Dict[str, object]]:
        return [merge.to_record() for merge in self.merges]

    def assignments(self, k: int, ids: Sequence[Any] | None = None) -> pd.DataFrame:
        """Return record-to-cluster assignments at ``K = k`` as a dataframe."""

        labels = self.partitions.labels(k)
        if ids is None:
            ids = [str(index) for index in range(self.record_count)]
        if len(ids) != self.record_count:
            raise ValueError(
                f"Expected {self.record_count} record ids; received {len(ids)}"
            )

        return pd.DataFrame(
            {
                "record_id": [str(record_id) for record_id in ids],
                "record_index": list(range(self.record_count)),
                "cluster": labels,
            }
        )


def cluster_records(
    records: Sequence[Any],
    params: ClusteringParameters | None = None,
) -> ClusteringResult:
    """Cluster ``records`` by repeatedly merging the closest pair of clusters."""

    params = params or ClusteringParameters()
    metric = resolve_metric(params.metric)
    linkage = resolve_linkage(params.linkage)
    reporter = ProgressReporter(params.on_progress)

    distances = build_distance_matrix(records, metric, key=params.key, on_progress=reporter)
    count = distances.shape[0]

    if count == 0:
        reporter.update(PHASE_MERGES, 1.0)
        return ClusteringResult(
            root=Cluster(indexes=()),
            distances=distances,
            partitions=PartitionTable([()]),
        )

    nodes: List[Cluster] = [Cluster(indexes=(index,)) for index in range(count)]
    live: List[int] = list(range(count))
    snapshots: List[Partition] = []
    merges: List[MergeStep] = []

    for iteration in range(count):
        reporter.update(PHASE_MERGES, (iteration + 1) / count)
        snapshots.append(tuple(nodes[slot].indexes for slot in live))

        if len(live) == 1:
            break

        if params.should_stop is not None and params.should_stop():
            raise ClusteringCancelled(
                f"Clustering cancelled after {len(merges)} of {count - 1} merges"
            )

        row, col, height = _nearest_pair(nodes, live, distances, linkage)
        left_slot, right_slot = live[row], live[col]
        left, right = nodes[left_slot], nodes[right_slot]
        merged = Cluster(
            indexes=left.indexes + right.indexes,
            height=height,
            children=(left, right),
        )
        nodes.append(merged)
        merges.append(
            MergeStep(
                step=len(merges) + 1,
                left=left_slot,
                right=right_slot,
                node=len(nodes) - 1,
                height=height,
                size=merged.size,
            )
        )
        logger.debug("Merged nodes %d and %d at height %.6g", left_slot, right_slot, height)

        live = [slot for position, slot in enumerate(live) if position not in (row, col)]
        live.append(len(nodes) - 1)

    root = nodes[live[0]]
    logger.info(
        "Clustered %d records with %d merges (root height %.6g)",
        count,
        len(merges),
        root.height,
    )

    return ClusteringResult(
        root=root,
        distances=distances,
        partitions=PartitionTable.from_snapshots(snapshots),
        merges=tuple(merges),
    )


def _nearest_pair(
    nodes: Sequence[Cluster],
    live: Sequence[int],
    distances: np.ndarray,
    linkage: Linkage,
) -> Tuple[int, int, float]:
    nearest = math.inf
    pair: Tuple[int, int] | None = None

    for row in range(len(live)):
        row_indexes = nodes[live[row]].indexes
        for col in range(row + 1, len(live)):
            value = float(linkage(row_indexes, nodes[live[col]].indexes, distances))
            if math.isnan(value):
                continue
            if pair is None or value < nearest:
                nearest = value
                pair = (row, col)

    if pair is None:
        raise ClusteringError(
            "No cluster pair has a comparable linkage value; check the metric for NaN results"
        )
    return pair[0], pair[1], nearest


__all__ = [
    "Cluster",
    "ClusteringCancelled",
    "ClusteringParameters",
    "ClusteringResult",
    "MergeStep",
    "Partition",
    "PartitionTable",
    "cluster_records",
]
