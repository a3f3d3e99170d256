"""Synthetic datasets for integration and regression testing.

Fixtures are organised in sub-directories that each contain one or more CSV
datasets of records with an identifier column and numeric feature columns.
"""

from __future__ import annotations

from pathlib import Path
_FIXTURES_ROOT = Path(__file__).resolve().parent


def available_fixtures() -> list[str]:
    """Return the names of the fixture scenarios that ship with the package."""

    return sorted(
        entry.name
        for entry in _FIXTURES_ROOT.iterdir()
        if entry.is_dir() and not entry.name.startswith("__")
    )


def fixture_path(name: str, dataset: str = "records") -> Path:
    """Return the absolute path to a fixture dataset.

    Parameters
    ----------
    name:
        Name of the fixture scenario (e.g., ``"blobs"``).
    dataset:
        Dataset to load from the fixture directory. The ``.csv`` suffix is
        optional.
    """

    normalised = dataset if dataset.endswith(".csv") else f"{dataset}.csv"
    path = _FIXTURES_ROOT / name / normalised
    if not path.exists():
        available = ", ".join(available_fixtures())
        raise FileNotFoundError(
            f"Dataset '{dataset}' not found for fixture '{name}'. Available fixtures: {available}"
        )
    return path


__all__ = ["available_fixtures", "fixture_path"]
