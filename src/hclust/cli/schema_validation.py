"""Utilities for validating CLI output rows against JSON schemas."""

from __future__ import annotations

import math
from functools import lru_cache
from typing import Any, Iterable, Mapping, MutableMapping, Sequence

import jsonschema
import numpy as np
import pandas as pd


SCHEMA_VERSION = "v1"

_SCHEMAS: Mapping[str, Mapping[str, Any]] = {
    "assignment": {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "title": "Record cluster assignment",
        "type": "object",
        "required": ["record_id", "record_index", "cluster"],
        "properties": {
            "record_id": {"type": "string", "minLength": 1},
            "record_index": {"type": "integer", "minimum": 0},
            "cluster": {"type": "integer", "minimum": 1},
        },
        "additionalProperties": False,
    },
    "merge": {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "title": "Dendrogram merge step",
        "type": "object",
        "required": ["step", "left", "right", "node", "height", "size"],
        "properties": {
            "step": {"type": "integer", "minimum": 1},
            "left": {"type": "integer", "minimum": 0},
            "right": {"type": "integer", "minimum": 0},
            "node": {"type": "integer", "minimum": 0},
            "height": {"type": ["number", "null"]},
            "size": {"type": "integer", "minimum": 2},
        },
        "additionalProperties": False,
    },
}


class SchemaValidationError(RuntimeError):
    """Raised when a payload fails validation against a JSON schema."""

    def __init__(self, schema: str, index: int, message: str) -> None:
        detail = f"{schema} record {index} failed validation: {message}"
        super().__init__(detail)
        self.schema = schema
        self.index = index
        self.message = message


class SchemaValidator:
    """Validate CLI output rows using the bundled JSON schemas."""

    def __init__(self, *, schema_version: str = SCHEMA_VERSION) -> None:
        self.schema_version = schema_version

    def validate_frame(
        self,
        schema: str,
        frame: pd.DataFrame | None,
        *,
        string_fields: Sequence[str] = (),
    ) -> None:
        if frame is None or frame.empty:
            return
        records = _normalise_frame(frame, string_fields=string_fields)
        self.validate_records(schema, records)

    def validate_records(
        self,
        schema: str,
        records: Iterable[Mapping[str, object]],
    ) -> None:
        validator = _load_validator(schema, schema_version=self.schema_version)
        for index, record in enumerate(records):
            try:
                validator.validate(_coerce_value(dict(record)))
            except jsonschema.ValidationError as exc:
                message = exc.message
                if exc.path:
                    path = ".".join(str(part) for part in exc.path)
                    message = f"{message} (path: {path})"
                raise SchemaValidationError(schema, index, message) from exc


@lru_cache(maxsize=None)
def _load_validator(schema: str, *, schema_version: str) -> jsonschema.Validator:
    if schema_version != SCHEMA_VERSION:
        raise ValueError(f"Unknown schema version '{schema_version}'")
    payload = _SCHEMAS.get(schema)
    if payload is None:
        raise ValueError(f"Unknown schema type '{schema}'")
    return jsonschema.Draft202012Validator(payload)


def _normalise_frame(
    frame: pd.DataFrame,
    *,
    string_fields: Sequence[str] = (),
) -> list[MutableMapping[str, object]]:
    records = frame.astype(object).where(frame.notna(), None).to_dict(orient="records")
    normalised: list[MutableMapping[str, object]] = []
    string_fields = tuple(string_fields)

    for record in records:
        converted: MutableMapping[str, object] = {}
        for key, value in record.items():
            coerced = _coerce_value(value)
            if key in string_fields and coerced is not None:
                coerced = str(coerced)
            converted[key] = coerced
        normalised.append(converted)

    return normalised


def _coerce_value(value: object) -> object:
    if isinstance(value, dict):
        return {str(key): _coerce_value(item) for key, item in value.items()}

    if isinstance(value, (list, tuple, set)):
        return [_coerce_value(item) for item in value]

    if isinstance(value, np.generic):
        value = value.item()

    if value is None:
        return None

    if isinstance(value, float) and math.isnan(value):
        return None

    return value


__all__ = [
    "SCHEMA_VERSION",
    "SchemaValidationError",
    "SchemaValidator",
]
