"""Data models for exercise catalogs and validation runs."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional, Sequence

from ..core.models import RunReport, TestCase

DIFFICULTIES = ("easy", "medium", "hard")

STATUSES = ("passed", "failed", "error", "tolerated", "skipped")


@dataclass(frozen=True)
class Exercise:
    id: str
    title: str
    category: str
    difficulty: str
    description: str
    test_cases: Sequence[TestCase]
    starter_code: str = ""
    solution: Optional[str] = None
    function: Optional[str] = None
    hints: Sequence[str] = field(default_factory=tuple)
    tags: Sequence[str] = field(default_factory=tuple)
    host_apis: bool = False
    source: Optional[Path] = None


@dataclass(frozen=True)
class Catalog:
    exercises: Sequence[Exercise]
    root: Path

    def __iter__(self) -> Iterator[Exercise]:
        return iter(self.exercises)

    def __len__(self) -> int:
        return len(self.exercises)

    def get(self, exercise_id: str) -> Optional[Exercise]:
        for exercise in self.exercises:
            if exercise.id == exercise_id:
                return exercise
        return None

    @property
    def categories(self) -> Sequence[str]:
        seen: list[str] = []
        for exercise in self.exercises:
            if exercise.category not in seen:
                seen.append(exercise.category)
        return tuple(seen)


@dataclass(frozen=True)
class ValidateOptions:
    ids: Sequence[str] = field(default_factory=tuple)
    categories: Sequence[str] = field(default_factory=tuple)
    tags: Sequence[str] = field(default_factory=tuple)
    check_starter: bool = False
    list_only: bool = False


@dataclass(frozen=True)
class ExerciseOutcome:
    exercise: Exercise
    status: str
    report: Optional[RunReport] = None
    details: str = ""
    duration_s: float = 0.0

    @property
    def passed(self) -> bool:
        return self.status == "passed"

    @property
    def counts_as_failure(self) -> bool:
        return self.status in ("failed", "error")
