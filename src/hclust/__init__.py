"""Exact agglomerative hierarchical clustering with elbow-based cluster selection."""

from .clustering import (
    ClusteringParameters,
    ClusteringResult,
    build_distance_matrix,
    cluster_records,
    find_elbow_point,
    select_cluster_count,
    within_cluster_variance,
)

__all__ = [
    "ClusteringParameters",
    "ClusteringResult",
    "build_distance_matrix",
    "cluster_records",
    "find_elbow_point",
    "select_cluster_count",
    "within_cluster_variance",
]
