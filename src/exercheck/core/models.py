"""Core dataclasses shared across exercheck subsystems."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from .values import jsonify


class _NotReturned:
    """Marks a result whose callable threw or timed out before returning."""

    def __repr__(self) -> str:
        return "<not returned>"


NOT_RETURNED = _NotReturned()


@dataclass(frozen=True)
class TestCase:
    """One declarative check: call the snippet with ``input`` and expect ``expected_output``."""

    __test__ = False  # keep pytest from collecting this class

    input: Any
    expected_output: Any
    description: Optional[str] = None

    def arguments(self) -> tuple:
        if isinstance(self.input, (list, tuple)):
            return tuple(self.input)
        return (self.input,)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TestCase":
        if "input" not in data:
            raise ValueError("Test case is missing 'input'")
        if "expected_output" in data:
            expected = data["expected_output"]
        elif "expectedOutput" in data:
            expected = data["expectedOutput"]
        else:
            raise ValueError("Test case is missing 'expected_output'")
        description = data.get("description")
        return cls(
            input=data["input"],
            expected_output=expected,
            description=str(description) if description is not None else None,
        )


@dataclass(frozen=True)
class CandidateFunction:
    """A callable binding harvested from the snippet."""

    name: str
    arity: int
    value: Callable[..., Any]


@dataclass
class TestResult:
    """Outcome of a single test case."""

    __test__ = False

    input: Any
    expected_output: Any
    passed: bool
    actual_output: Any = NOT_RETURNED
    error: Optional[str] = None
    description: Optional[str] = None
    mismatch: Optional[str] = None

    @property
    def has_output(self) -> bool:
        return self.actual_output is not NOT_RETURNED

    def to_dict(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "input": jsonify(self.input),
            "expected_output": jsonify(self.expected_output),
            "passed": self.passed,
        }
        if self.has_output:
            record["actual_output"] = jsonify(self.actual_output)
        if self.error is not None:
            record["error"] = self.error
        if self.description is not None:
            record["description"] = self.description
        if self.mismatch is not None:
            record["mismatch"] = self.mismatch
        return record


@dataclass
class RunReport:
    """The sole output of a harness run."""

    all_passed: bool
    results: List[TestResult] = field(default_factory=list)
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    logs: List[str] = field(default_factory=list)

    @classmethod
    def failure(
        cls,
        message: str,
        *,
        warnings: Sequence[str] = (),
        logs: Sequence[str] = (),
    ) -> "RunReport":
        return cls(all_passed=False, results=[], error=message, warnings=list(warnings), logs=list(logs))

    @classmethod
    def from_results(
        cls,
        results: Sequence[TestResult],
        *,
        warnings: Sequence[str] = (),
        logs: Sequence[str] = (),
    ) -> "RunReport":
        return cls(
            all_passed=all(result.passed for result in results),
            results=list(results),
            warnings=list(warnings),
            logs=list(logs),
        )

    @property
    def passed_count(self) -> int:
        return sum(1 for result in self.results if result.passed)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "all_passed": self.all_passed,
            "results": [result.to_dict() for result in self.results],
        }
        if self.error is not None:
            payload["error"] = self.error
        if self.warnings:
            payload["warnings"] = list(self.warnings)
        if self.logs:
            payload["logs"] = list(self.logs)
        return payload
