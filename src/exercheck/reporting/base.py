"""Reporter interface definitions."""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from ..catalog.models import Exercise, ExerciseOutcome


class Reporter:
    """Interface for output renderers."""

    def on_start(self, exercises: Sequence["Exercise"]) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def on_exercise_result(self, outcome: "ExerciseOutcome", index: int, total: int) -> None:  # pragma: no cover
        raise NotImplementedError

    def on_complete(self, outcomes: Sequence["ExerciseOutcome"]) -> None:  # pragma: no cover
        raise NotImplementedError


class ReportManager:
    """Dispatches lifecycle callbacks to multiple reporters."""

    def __init__(self, reporters: Sequence[Reporter]) -> None:
        self._reporters = list(reporters)

    def start(self, exercises: Sequence["Exercise"]) -> None:
        for reporter in self._reporters:
            reporter.on_start(exercises)

    def handle_result(self, outcome: "ExerciseOutcome", index: int, total: int) -> None:
        for reporter in self._reporters:
            reporter.on_exercise_result(outcome, index, total)

    def complete(self, outcomes: Sequence["ExerciseOutcome"]) -> None:
        for reporter in self._reporters:
            reporter.on_complete(outcomes)

    def reporters(self) -> List[Reporter]:
        return list(self._reporters)


def count_statuses(outcomes: Sequence["ExerciseOutcome"]) -> dict:
    counts = {"passed": 0, "failed": 0, "error": 0, "tolerated": 0, "skipped": 0}
    for outcome in outcomes:
        counts[outcome.status] = counts.get(outcome.status, 0) + 1
    return counts
