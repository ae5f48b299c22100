"""Python representations of JavaScript values and their wire encoding.

Values cross the worker boundary as JSON. Anything JSON cannot express
(``undefined``, ``NaN``, bigint, functions, Maps, ...) travels as an object
tagged with :data:`WIRE_TAG`.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

WIRE_TAG = "__jsv__"


class _Undefined:
    """Singleton standing in for JavaScript ``undefined``."""

    _instance: Optional["_Undefined"] = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED = _Undefined()


@dataclass(frozen=True)
class JsFunction:
    """A JavaScript function given by its source text."""

    source: str
    name: str = ""

    def __str__(self) -> str:
        return self.source


def to_wire(value: Any) -> Any:
    """Encode a Python value for the worker."""

    if value is UNDEFINED:
        return {WIRE_TAG: "undefined"}
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value):
            return {WIRE_TAG: "nan"}
        if math.isinf(value):
            return {WIRE_TAG: "inf" if value > 0 else "-inf"}
        return value
    if isinstance(value, JsFunction):
        return {WIRE_TAG: "function", "source": value.source}
    if isinstance(value, (list, tuple)):
        return [to_wire(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return {WIRE_TAG: "set", "values": [to_wire(item) for item in value]}
    if isinstance(value, dict):
        entries = {str(key): to_wire(val) for key, val in value.items()}
        if WIRE_TAG in entries:
            return {WIRE_TAG: "object", "entries": entries}
        return entries
    raise TypeError(f"Cannot pass value of type {type(value).__name__} to a snippet")


def from_wire(data: Any) -> Any:
    """Decode a worker value into its Python counterpart."""

    if isinstance(data, list):
        return [from_wire(item) for item in data]
    if not isinstance(data, dict):
        return data
    tag = data.get(WIRE_TAG)
    if tag is None:
        return {key: from_wire(val) for key, val in data.items()}
    if tag == "undefined":
        return UNDEFINED
    if tag == "nan":
        return math.nan
    if tag == "inf":
        return math.inf
    if tag == "-inf":
        return -math.inf
    if tag == "bigint":
        return int(data["value"])
    if tag == "function":
        return JsFunction(source=str(data.get("source", "")), name=str(data.get("name", "")))
    if tag == "map":
        return _decode_map(data.get("entries") or [])
    if tag == "set":
        return [from_wire(item) for item in data.get("values") or []]
    if tag in ("date", "regexp", "symbol"):
        return str(data.get("value", ""))
    if tag == "circular":
        return "[Circular]"
    if tag == "truncated":
        return "[Truncated]"
    if tag == "object":
        return {key: from_wire(val) for key, val in (data.get("entries") or {}).items()}
    raise ValueError(f"Unknown wire tag {tag!r}")


def _decode_map(entries: List[Any]) -> Any:
    pairs = [(from_wire(key), from_wire(val)) for key, val in entries]
    result: Dict[Any, Any] = {}
    for key, val in pairs:
        try:
            result[key] = val
        except TypeError:
            return [[k, v] for k, v in pairs]
    return result


def describe(value: Any) -> str:
    """Short JS-flavoured rendering used in mismatch messages and reports."""

    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, str):
        return repr(value)
    if isinstance(value, JsFunction):
        return f"[Function {value.name or 'anonymous'}]"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(describe(item) for item in value) + "]"
    if isinstance(value, dict):
        return "{" + ", ".join(f"{key}: {describe(val)}" for key, val in value.items()) + "}"
    return str(value)


def jsonify(value: Any) -> Any:
    """Convert decoded values into strictly JSON-serializable data for reports."""

    if value is UNDEFINED:
        return None
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return describe(value)
    if isinstance(value, JsFunction):
        return value.source
    if isinstance(value, dict):
        return {str(key): jsonify(val) for key, val in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [jsonify(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)
