"""Utilities for loading clustering inputs from tabular files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import numpy as np
import pandas as pd

__all__ = [
    "MissingColumnsError",
    "RecordSet",
    "frame_to_vectors",
    "load_frame",
    "load_records",
]


class MissingColumnsError(ValueError):
    """Raised when a dataset is missing the requested columns."""

    def __init__(self, missing: Sequence[str], available: Sequence[str]):
        message = (
            f"Dataset is missing requested columns: {', '.join(missing)}. "
            f"Available columns: {', '.join(available) or '(none)'}."
        )
        super().__init__(message)
        self.missing = list(missing)
        self.available = list(available)


@dataclass(frozen=True, slots=True)
class RecordSet:
    """Record identifiers with their feature vectors."""

    ids: tuple[str, ...]
    vectors: np.ndarray

    def __len__(self) -> int:
        return len(self.ids)


def load_records(
    path: str | Path,
    *,
    columns: Sequence[str] | None = None,
    key: str | None = None,
    id_column: str | None = None,
) -> RecordSet:
    """Load a CSV or JSON dataset and extract one feature vector per row."""

    frame = load_frame(path)
    if id_column is not None:
        _require_columns(frame, [id_column])
        ids = tuple(frame[id_column].astype(str))
        if columns is None and key is None:
            frame = frame.drop(columns=[id_column])
    else:
        ids = tuple(str(index) for index in range(len(frame)))

    vectors = frame_to_vectors(frame, columns=columns, key=key)
    return RecordSet(ids=ids, vectors=vectors)


def load_frame(path_like: str | Path) -> pd.DataFrame:
    """Read a CSV, JSON array, or JSON lines file into a dataframe."""

    path = Path(path_like)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(path)
    if suffix in {".jsonl", ".ndjson"}:
        return pd.read_json(path, lines=True)
    if suffix == ".json":
        return _read_json(path)
    raise ValueError(f"Unsupported file type '{suffix}' for clustering input")


def frame_to_vectors(
    frame: pd.DataFrame,
    *,
    columns: Sequence[str] | None = None,
    key: str | None = None,
) -> np.ndarray:
    """Return an ``(N, D)`` float array built from ``frame``.

    ``key`` names a column whose cells already hold whole vectors (lists).
    Otherwise ``columns`` are stacked, defaulting to every numeric column.
    """

    if key is not None and columns is not None:
        raise ValueError("Specify either columns or key, not both")

    if key is not None:
        _require_columns(frame, [key])
        rows = [np.asarray(value, dtype=float) for value in frame[key]]
        if not rows:
            return np.empty((0, 0), dtype=float)
        widths = {row.shape for row in rows}
        if len(widths) != 1:
            raise ValueError(f"Field '{key}' holds vectors of differing lengths")
        return np.vstack(rows)

    if columns is None:
        columns = [
            column
            for column in frame.columns
            if pd.api.types.is_numeric_dtype(frame[column])
        ]
        if not columns:
            raise ValueError("Dataset has no numeric columns to cluster")
    else:
        _require_columns(frame, columns)

    return frame.loc[:, list(columns)].to_numpy(dtype=float, copy=True)


def _require_columns(frame: pd.DataFrame, columns: Sequence[str]) -> None:
    missing = sorted(column for column in columns if column not in frame.columns)
    if missing:
        raise MissingColumnsError(missing, [str(column) for column in frame.columns])


def _read_json(path: Path) -> pd.DataFrame:
    raw = path.read_text(encoding="utf-8").strip()
    if not raw:
        return pd.DataFrame()
    if raw[0] == "{":
        return pd.read_json(path, lines=True)
    return pd.read_json(path)
