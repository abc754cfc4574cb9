import dataclasses

import numpy as np
import pytest

from nc2parquet.filters.results import (
    SingleResult, PairsResult, TripletsResult, is_empty, describe_result,
)


def test_single_result_normalizes_indices():
    result = SingleResult("time", [np.int64(2), 3, 3])
    assert result.indices == frozenset({2, 3})
    assert all(type(i) is int for i in result.indices)
    assert result.dimensions == ("time",)
    assert len(result) == 2


def test_pairs_and_triplets_keep_order():
    pairs = PairsResult("lat", "lon", [(2, 0), (np.int32(1), 1)])
    assert pairs.pairs == ((2, 0), (1, 1))
    assert pairs.dimensions == ("lat", "lon")

    triplets = TripletsResult("time", "lat", "lon", [[3, 1, 0]])
    assert triplets.triplets == ((3, 1, 0),)
    assert len(triplets) == 1


def test_results_are_frozen():
    result = SingleResult("time", {1})
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.dimension = "lat"


def test_is_empty():
    assert is_empty(SingleResult("time"))
    assert is_empty(PairsResult("lat", "lon", []))
    assert not is_empty(TripletsResult("time", "lat", "lon", [(0, 0, 0)]))


def test_describe_result():
    assert describe_result(SingleResult("time", {1, 2})) == "2 indices for dimension 'time'"
    assert describe_result(PairsResult("lat", "lon", [(1, 1)])) == (
        "1 coordinate pairs for dimensions 'lat', 'lon'"
    )
    assert "triplets" in describe_result(TripletsResult("t", "a", "b", []))


def test_describe_result_rejects_other_types():
    with pytest.raises(TypeError):
        describe_result({"dimension": "time"})


def test_is_empty_property():
    assert SingleResult("time").is_empty
    assert not PairsResult("lat", "lon", [(0, 0)]).is_empty
