import numpy as np
import pandas as pd
import pytest

from hclust.cli.schema_validation import SchemaValidationError, SchemaValidator


def test_validate_frame_accepts_assignments():
    frame = pd.DataFrame(
        {
            "record_id": [1, 2],
            "record_index": np.array([0, 1], dtype=np.int64),
            "cluster": [1, 2],
        }
    )

    SchemaValidator().validate_frame("assignment", frame, string_fields=("record_id",))


def test_validate_records_reports_index_and_path():
    records = [
        {"record_id": "a", "record_index": 0, "cluster": 1},
        {"record_id": "b", "record_index": 1, "cluster": 0},
    ]

    with pytest.raises(SchemaValidationError) as excinfo:
        SchemaValidator().validate_records("assignment", records)

    assert excinfo.value.index == 1
    assert "cluster" in str(excinfo.value)


def test_validate_merge_records():
    validator = SchemaValidator()
    validator.validate_records(
        "merge",
        [{"step": 1, "left": 0, "right": 1, "node": 2, "height": 0.5, "size": 2}],
    )

    with pytest.raises(SchemaValidationError):
        validator.validate_records(
            "merge",
            [{"step": 1, "left": 0, "right": 1, "node": 2, "height": 0.5, "size": 1}],
        )


def test_unknown_schema_is_rejected():
    with pytest.raises(ValueError):
        SchemaValidator().validate_records("dendrogram", [{}])
