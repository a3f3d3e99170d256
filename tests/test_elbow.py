import math

import numpy as np
import pytest

from hclust.clustering import (
    ClusteringParameters,
    ElbowSelection,
    cluster_records,
    cluster_variance,
    find_elbow_point,
    select_cluster_count,
    variance_curve,
    within_cluster_variance,
)


FOUR_POINTS = [[0.0, 0.0], [0.0, 1.0], [5.0, 5.0], [5.0, 6.0]]


@pytest.fixture
def four_point_result():
    return cluster_records(FOUR_POINTS, ClusteringParameters(metric="euclidean"))


def test_find_elbow_point_diminishing_returns():
    # Perpendicular numerators for K = 2..5 are 4.8, 5.6, 2.8 and 0.
    assert find_elbow_point([10.0, 8.0, 7.0, 6.9, 6.8]) == 3


def test_find_elbow_point_degenerate_curves():
    assert find_elbow_point([]) == 1
    assert find_elbow_point([4.0]) == 1
    assert find_elbow_point([5.0, 1.0]) == 1


def test_find_elbow_point_straight_line_has_no_elbow():
    assert find_elbow_point([3.0, 2.0, 1.0, 0.0]) == 1


def test_cluster_variance():
    distances = np.array(
        [
            [0.0, 2.0, 4.0],
            [2.0, 0.0, 6.0],
            [4.0, 6.0, 0.0],
        ]
    )

    assert cluster_variance((0, 1, 2), distances) == pytest.approx(4.0)
    assert cluster_variance((1,), distances) == 0.0
    assert cluster_variance((), distances) == 0.0


def test_within_cluster_variance_levels(four_point_result):
    partitions = four_point_result.partitions
    distances = four_point_result.distances

    full = (1 + math.sqrt(50) + math.sqrt(61) + math.sqrt(41) + math.sqrt(50) + 1) / 6
    assert within_cluster_variance(partitions, distances, 1) == pytest.approx(full)
    assert within_cluster_variance(partitions, distances, 2) == pytest.approx(2.0)
    assert within_cluster_variance(partitions, distances, 3) == pytest.approx(1.0)
    assert within_cluster_variance(partitions, distances, 4) == 0.0


def test_within_cluster_variance_out_of_range(four_point_result):
    partitions = four_point_result.partitions
    distances = four_point_result.distances

    assert within_cluster_variance(partitions, distances, 0) is None
    assert within_cluster_variance(partitions, distances, 5) is None
    assert within_cluster_variance(partitions, distances, -1) is None


def test_variance_curve_and_selection(four_point_result):
    curve = variance_curve(four_point_result.partitions, four_point_result.distances)

    assert len(curve) == 4
    assert curve[1:] == pytest.approx([2.0, 1.0, 0.0])

    selection = select_cluster_count(four_point_result)
    assert selection.k == 2
    assert selection.variances == pytest.approx(tuple(curve))
    assert selection.to_dict()["k"] == 2


def test_select_cluster_count_small_inputs():
    empty = cluster_records([], ClusteringParameters(metric="euclidean"))
    single = cluster_records([[1.0]], ClusteringParameters(metric="euclidean"))

    assert select_cluster_count(empty) == ElbowSelection(k=0, variances=())
    assert select_cluster_count(single) == ElbowSelection(k=1, variances=(0.0,))
