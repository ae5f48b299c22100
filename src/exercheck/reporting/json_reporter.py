"""JSON reporter emitting structured validation results."""
from __future__ import annotations

import datetime as dt
import json
import pathlib
import time
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence

import click
from jsonschema import validate

from .base import Reporter, count_statuses
from .schema import REPORT_SCHEMA, SCHEMA_VERSION

if TYPE_CHECKING:  # pragma: no cover
    from ..catalog.models import Exercise, ExerciseOutcome


class JsonReporter(Reporter):
    """Writes results as JSON validated against the schema.

    Without a path the document goes to stdout.
    """

    def __init__(self, path: Optional[str] = None) -> None:
        self._path = pathlib.Path(path) if path else None
        self._records: list[Dict[str, Any]] = []
        self._start_time = 0.0

    def on_start(self, exercises: Sequence["Exercise"]) -> None:
        self._records.clear()
        self._start_time = time.perf_counter()

    def on_exercise_result(self, outcome: "ExerciseOutcome", index: int, total: int) -> None:
        self._records.append(outcome_to_dict(outcome))

    def on_complete(self, outcomes: Sequence["ExerciseOutcome"]) -> None:
        counts = count_statuses(outcomes)
        payload = {
            "schema_version": SCHEMA_VERSION,
            "generated_at": dt.datetime.now(dt.timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
            "summary": {
                "total": len(outcomes),
                "passed": counts["passed"],
                "failed": counts["failed"],
                "errors": counts["error"],
                "tolerated": counts["tolerated"],
                "skipped": counts["skipped"],
                "duration_s": time.perf_counter() - self._start_time,
            },
            "exercises": self._records,
        }
        validate(instance=payload, schema=REPORT_SCHEMA)
        text = json.dumps(payload, indent=2)
        if self._path is None:
            click.echo(text)
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(text, encoding="utf-8")
        except OSError as exc:  # pragma: no cover - filesystem protection
            raise RuntimeError(f"Failed to write JSON report to {self._path}: {exc}") from exc
        click.echo(f"JSON report written to {self._path}")


def outcome_to_dict(outcome: "ExerciseOutcome") -> Dict[str, Any]:
    exercise = outcome.exercise
    record: Dict[str, Any] = {
        "id": exercise.id,
        "title": exercise.title,
        "category": exercise.category,
        "difficulty": exercise.difficulty,
        "status": outcome.status,
        "duration_ms": outcome.duration_s * 1000,
    }
    if outcome.details:
        record["details"] = outcome.details
    if outcome.report is not None:
        record["report"] = outcome.report.to_dict()
    return record
