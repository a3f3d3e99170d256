"""Command-line entry point for hierarchical clustering."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from importlib import metadata
from pathlib import Path
from typing import Sequence

import pandas as pd

from hclust.cli.schema_validation import SchemaValidationError, SchemaValidator
from hclust.clustering import (
    LINKAGES,
    METRICS,
    ClusteringError,
    ClusteringParameters,
    DimensionMismatchError,
    cluster_records,
    find_elbow_point,
    select_cluster_count,
)
from hclust.data import MissingColumnsError, RecordSet, load_records
from hclust.progress import log_progress


class HclustCliError(RuntimeError):
    """Raised when CLI arguments cannot be satisfied."""


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_SCHEMA_VALIDATOR = SchemaValidator()


def _get_package_version() -> str:
    try:
        return metadata.version("hclust-python")
    except metadata.PackageNotFoundError:
        return "0.0.0"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hclust",
        description="Agglomerative hierarchical clustering with elbow-based cluster selection",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    version = _get_package_version()
    parser.add_argument(
        "--version",
        action="store_true",
        help=f"Show the installed hclust-python version ({version})",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="WARNING",
        help="Logging verbosity for messages written to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="command")

    cluster = subparsers.add_parser(
        "cluster",
        help="Cluster records and write per-record assignments",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    cluster.add_argument(
        "--input",
        required=True,
        help="Path to the records dataset (CSV, JSON, or JSON lines)",
    )
    features = cluster.add_mutually_exclusive_group()
    features.add_argument(
        "--columns",
        help="Comma-separated numeric columns forming each vector (defaults to all numeric columns)",
    )
    features.add_argument(
        "--key",
        help="Field whose values are complete vectors (JSON inputs)",
    )
    cluster.add_argument(
        "--id-column",
        help="Column holding record identifiers (defaults to the row position)",
    )
    cluster.add_argument(
        "--metric",
        choices=sorted(METRICS),
        default="cosine",
        help="Pairwise metric minimised when merging",
    )
    cluster.add_argument(
        "--linkage",
        choices=sorted(LINKAGES),
        default="average",
        help="Linkage used to compare clusters",
    )
    cluster.add_argument(
        "--k",
        type=int,
        help="Number of clusters to assign (defaults to the variance elbow)",
    )
    cluster.add_argument(
        "--output",
        required=True,
        help="Destination for record assignments (CSV or JSON lines)",
    )
    cluster.add_argument(
        "--merges",
        help="Optional path to persist the merge history (CSV or JSON lines)",
    )
    cluster.add_argument(
        "--summary",
        help="Optional path to persist the variance curve and selected K (JSON)",
    )
    cluster.add_argument(
        "--progress",
        action="store_true",
        help="Log clustering progress at INFO level",
    )
    cluster.set_defaults(handler=_handle_cluster)

    elbow = subparsers.add_parser(
        "elbow",
        help="Print the elbow K for a variance curve",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    elbow.add_argument(
        "--variances",
        required=True,
        nargs="+",
        type=float,
        help="Within-cluster variance for K = 1..N",
    )
    elbow.set_defaults(handler=_handle_elbow)

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if getattr(args, "version", False):
        print(f"hclust-python {_get_package_version()}")
        raise SystemExit(0)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return

    try:
        handler(args)
    except HclustCliError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(f"Error: {exc}") from exc


def _handle_cluster(args: argparse.Namespace) -> None:
    records = _load_input(args)
    if args.k is not None and not (1 <= args.k <= max(len(records), 1)):
        raise HclustCliError(f"--k must be between 1 and {len(records)}")

    if args.progress:
        logging.getLogger("hclust.progress").setLevel(logging.INFO)

    params = ClusteringParameters(
        metric=args.metric,
        linkage=args.linkage,
        on_progress=log_progress if args.progress else None,
    )

    try:
        result = cluster_records(records.vectors, params)
    except (ClusteringError, DimensionMismatchError) as exc:
        raise HclustCliError(str(exc)) from exc

    selection = select_cluster_count(result)
    k = args.k if args.k is not None else selection.k

    if result.record_count:
        assignments = result.assignments(k, ids=records.ids)
    else:
        assignments = pd.DataFrame(columns=["record_id", "record_index", "cluster"])
    _validate_frame("assignment", assignments, string_fields=("record_id",))
    _write_table(assignments, Path(args.output))

    if args.merges:
        merges = pd.DataFrame.from_records(
            result.merge_records(),
            columns=["step", "left", "right", "node", "height", "size"],
        )
        _validate_frame("merge", merges)
        _write_table(merges, Path(args.merges))

    if args.summary:
        summary: dict[str, object] = {
            "record_count": result.record_count,
            "k": k,
            "elbow_k": selection.k,
            "variances": list(selection.variances),
            "metric": args.metric,
            "linkage": args.linkage,
            "root_height": result.root.height,
            "order": list(result.order),
        }
        _write_json(summary, Path(args.summary))


def _handle_elbow(args: argparse.Namespace) -> None:
    print(find_elbow_point(args.variances))


def _load_input(args: argparse.Namespace) -> RecordSet:
    columns = None
    if args.columns:
        columns = [column.strip() for column in args.columns.split(",") if column.strip()]

    try:
        return load_records(
            args.input,
            columns=columns,
            key=args.key,
            id_column=args.id_column,
        )
    except FileNotFoundError as exc:
        raise HclustCliError(f"Input file '{args.input}' was not found") from exc
    except MissingColumnsError as exc:
        raise HclustCliError(str(exc)) from exc
    except ValueError as exc:
        raise HclustCliError(str(exc)) from exc


def _validate_frame(
    schema: str,
    frame: pd.DataFrame,
    *,
    string_fields: Sequence[str] = (),
) -> None:
    try:
        _SCHEMA_VALIDATOR.validate_frame(schema, frame, string_fields=string_fields)
    except SchemaValidationError as exc:
        raise HclustCliError(str(exc)) from exc


def _write_table(frame: pd.DataFrame, path: Path) -> None:
    path = path.expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        if path.suffix.lower() in {".json", ".jsonl", ".ndjson"}:
            frame.to_json(path, orient="records", lines=True)
        else:
            frame.to_csv(path, index=False)
    except OSError as exc:  # pragma: no cover - unlikely in tests
        raise HclustCliError(f"Failed to write output to '{path}': {exc}")


def _write_json(data: dict[str, object], path: Path) -> None:
    path = path.expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        path.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    except OSError as exc:  # pragma: no cover - unlikely in tests
        raise HclustCliError(f"Failed to write JSON output to '{path}': {exc}")


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
