from collections import namedtuple

import numpy as np
import pytest

from hclust.clustering import build_distance_matrix, euclidean_distance, extract_vectors


POINTS = [[0.0, 0.0], [3.0, 4.0], [6.0, 8.0]]


def test_build_distance_matrix_euclidean():
    matrix = build_distance_matrix(POINTS, euclidean_distance)

    expected = np.array(
        [
            [0.0, 5.0, 10.0],
            [5.0, 0.0, 5.0],
            [10.0, 5.0, 0.0],
        ]
    )
    np.testing.assert_allclose(matrix, expected)
    assert matrix.dtype == np.float64


def test_build_distance_matrix_accepts_metric_names():
    by_name = build_distance_matrix(POINTS, "euclidean")
    by_callable = build_distance_matrix(POINTS, euclidean_distance)

    np.testing.assert_array_equal(by_name, by_callable)


def test_build_distance_matrix_is_read_only():
    matrix = build_distance_matrix(POINTS, "euclidean")

    with pytest.raises(ValueError):
        matrix[0, 1] = 42.0


def test_build_distance_matrix_is_idempotent():
    rng = np.random.default_rng(7)
    records = rng.normal(size=(6, 4))

    first = build_distance_matrix(records)
    second = build_distance_matrix(records)

    assert first.tobytes() == second.tobytes()


def test_build_distance_matrix_computes_both_triangles():
    def directed(a, b):
        return a[0] - b[0]

    matrix = build_distance_matrix([[1.0], [4.0]], directed)

    assert matrix[0, 1] == -3.0
    assert matrix[1, 0] == 3.0


def test_build_distance_matrix_propagates_metric_errors():
    def failing(a, b):
        raise RuntimeError("metric exploded")

    with pytest.raises(RuntimeError, match="metric exploded"):
        build_distance_matrix(POINTS, failing)


def test_build_distance_matrix_extracts_vectors_by_key():
    Point = namedtuple("Point", ["name", "coords"])
    mappings = [{"name": name, "coords": coords} for name, coords in zip("abc", POINTS)]
    objects = [Point(name, coords) for name, coords in zip("abc", POINTS)]

    from_mappings = build_distance_matrix(mappings, "euclidean", key="coords")
    from_objects = build_distance_matrix(objects, "euclidean", key="coords")

    np.testing.assert_array_equal(from_mappings, build_distance_matrix(POINTS, "euclidean"))
    np.testing.assert_array_equal(from_objects, from_mappings)


def test_extract_vectors_without_key_returns_records():
    assert extract_vectors(POINTS) == POINTS


def test_build_distance_matrix_reports_first_phase_progress():
    updates = []

    build_distance_matrix(POINTS, "euclidean", on_progress=updates.append)

    assert updates == pytest.approx([1 / 6, 2 / 6, 3 / 6])


def test_build_distance_matrix_empty_input():
    updates = []

    matrix = build_distance_matrix([], "euclidean", on_progress=updates.append)

    assert matrix.shape == (0, 0)
    assert updates == []
