from __future__ import annotations

import math

import pytest

from exercheck.core.comparator import compare_values, deep_equal
from exercheck.core.values import UNDEFINED, JsFunction


@pytest.mark.parametrize(
    "actual, expected",
    [
        (5, 5),
        (5, 5.0),
        (math.nan, math.nan),
        ("abc", "abc"),
        ([1, [2, 3]], [1, [2, 3]]),
        ({"a": 1, "b": {"c": [True]}}, {"b": {"c": [True]}, "a": 1}),
        (None, None),
        (UNDEFINED, UNDEFINED),
        ([], []),
    ],
)
def test_equal_values(actual, expected) -> None:
    assert deep_equal(actual, expected)
    assert compare_values(actual, expected).message is None


@pytest.mark.parametrize(
    "actual, expected",
    [
        (True, 1),
        (0, False),
        ("5", 5),
        (None, UNDEFINED),
        (UNDEFINED, None),
        ([1, 2], (1, 2, 3)),
        ({"a": 1}, [1]),
        ([1, [2, 3]], [1, 2, 3]),
    ],
)
def test_unequal_values(actual, expected) -> None:
    assert not deep_equal(actual, expected)


def test_mismatch_points_at_first_difference() -> None:
    result = compare_values([{"id": 1}, {"id": 2, "tags": ["x"]}], [{"id": 1}, {"id": 2, "tags": ["y"]}])
    assert not result.passed
    assert result.message == "$[1].tags[0]: expected 'y', got 'x'"


def test_length_and_key_mismatches() -> None:
    assert compare_values([1], [1, 2]).message == "$: expected length 2, got 1"
    assert compare_values({"a": 1}, {"a": 1, "b": 2}).message == "$: missing key 'b'"
    assert compare_values({"a": 1, "c": 3}, {"a": 1}).message == "$: unexpected key 'c'"


def test_scalar_mismatch_uses_js_rendering() -> None:
    assert compare_values(UNDEFINED, 3).message == "$: expected 3, got undefined"
    assert compare_values(None, True).message == "$: expected true, got null"
    assert compare_values(math.inf, 1.5).message == "$: expected 1.5, got Infinity"


def test_functions_compare_by_source() -> None:
    assert deep_equal(JsFunction("(x) => x"), JsFunction("(x) => x", name="id"))
    assert not deep_equal(JsFunction("(x) => x"), JsFunction("(y) => y"))
