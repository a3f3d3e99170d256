"""Data loading utilities for clustering inputs."""

from .loaders import MissingColumnsError, RecordSet, frame_to_vectors, load_frame, load_records

__all__ = [
    "MissingColumnsError",
    "RecordSet",
    "frame_to_vectors",
    "load_frame",
    "load_records",
]
