"""Agglomerative hierarchical clustering and cluster-count selection."""

from .agglomerative import (
    Cluster,
    ClusteringCancelled,
    ClusteringParameters,
    ClusteringResult,
    MergeStep,
    PartitionTable,
    cluster_records,
)
from .elbow import (
    ElbowSelection,
    cluster_variance,
    find_elbow_point,
    select_cluster_count,
    variance_curve,
    within_cluster_variance,
)
from .matrix import build_distance_matrix, extract_vectors
from .metrics import (
    LINKAGES,
    METRICS,
    ClusteringError,
    DimensionMismatchError,
    average_distance,
    complete_linkage,
    cosine_similarity,
    euclidean_distance,
    resolve_linkage,
    resolve_metric,
    single_linkage,
)

__all__ = [
    "Cluster",
    "ClusteringCancelled",
    "ClusteringError",
    "ClusteringParameters",
    "ClusteringResult",
    "DimensionMismatchError",
    "ElbowSelection",
    "LINKAGES",
    "METRICS",
    "MergeStep",
    "PartitionTable",
    "average_distance",
    "build_distance_matrix",
    "cluster_records",
    "cluster_variance",
    "complete_linkage",
    "cosine_similarity",
    "euclidean_distance",
    "extract_vectors",
    "find_elbow_point",
    "resolve_linkage",
    "resolve_metric",
    "select_cluster_count",
    "single_linkage",
    "variance_curve",
    "within_cluster_variance",
]
