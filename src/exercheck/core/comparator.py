"""Structural deep equality between snippet outputs and expected values."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional

from .values import UNDEFINED, JsFunction, describe


@dataclass
class ComparisonResult:
    """Outcome of comparing one produced value with its expectation."""

    passed: bool
    message: Optional[str] = None


def compare_values(actual: Any, expected: Any) -> ComparisonResult:
    mismatch = _compare(actual, expected, "$")
    if mismatch is None:
        return ComparisonResult(passed=True)
    return ComparisonResult(passed=False, message=mismatch)


def deep_equal(actual: Any, expected: Any) -> bool:
    return _compare(actual, expected, "$") is None


def _compare(actual: Any, expected: Any, path: str) -> Optional[str]:
    if actual is expected:
        return None
    if actual is UNDEFINED or expected is UNDEFINED or actual is None or expected is None:
        return _differs(path, actual, expected)

    if isinstance(actual, bool) or isinstance(expected, bool):
        if isinstance(actual, bool) and isinstance(expected, bool) and actual == expected:
            return None
        return _differs(path, actual, expected)

    if _is_number(actual) and _is_number(expected):
        if _is_nan(actual) and _is_nan(expected):
            return None
        return None if actual == expected else _differs(path, actual, expected)

    if isinstance(actual, str) and isinstance(expected, str):
        return None if actual == expected else _differs(path, actual, expected)

    if isinstance(actual, (list, tuple)) and isinstance(expected, (list, tuple)):
        if len(actual) != len(expected):
            return f"{path}: expected length {len(expected)}, got {len(actual)}"
        for index, (act, exp) in enumerate(zip(actual, expected)):
            found = _compare(act, exp, f"{path}[{index}]")
            if found is not None:
                return found
        return None

    if isinstance(actual, dict) and isinstance(expected, dict):
        act_map = {str(key): val for key, val in actual.items()}
        exp_map = {str(key): val for key, val in expected.items()}
        missing = [key for key in exp_map if key not in act_map]
        if missing:
            return f"{path}: missing key {missing[0]!r}"
        extra = [key for key in act_map if key not in exp_map]
        if extra:
            return f"{path}: unexpected key {extra[0]!r}"
        for key, exp in exp_map.items():
            found = _compare(act_map[key], exp, f"{path}.{key}")
            if found is not None:
                return found
        return None

    if isinstance(actual, JsFunction) and isinstance(expected, JsFunction):
        return None if actual.source == expected.source else _differs(path, actual, expected)

    if type(actual) is type(expected) and actual == expected:
        return None
    return _differs(path, actual, expected)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_nan(value: Any) -> bool:
    return isinstance(value, float) and math.isnan(value)


def _differs(path: str, actual: Any, expected: Any) -> str:
    return f"{path}: expected {describe(expected)}, got {describe(actual)}"
