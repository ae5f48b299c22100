"""Terminal reporter rendering progress and summaries."""
from __future__ import annotations

import time
from typing import TYPE_CHECKING, Optional, Sequence

import click

from ..core.models import RunReport, TestResult
from ..core.values import describe
from .base import Reporter, count_statuses

if TYPE_CHECKING:  # pragma: no cover
    from ..catalog.models import Exercise, ExerciseOutcome


STATUS_COLORS = {
    "passed": "green",
    "failed": "red",
    "error": "red",
    "tolerated": "yellow",
    "skipped": "cyan",
}

STATUS_LABELS = {
    "passed": "PASS",
    "failed": "FAIL",
    "error": "ERROR",
    "tolerated": "TOLERATED",
    "skipped": "SKIP",
}


class TerminalReporter(Reporter):
    """Human-readable reporter that streams to stdout."""

    def __init__(self, *, use_color: bool = True) -> None:
        self._use_color = use_color
        self._start_time = 0.0
        self._failures: list[tuple[int, "ExerciseOutcome"]] = []

    def on_start(self, exercises: Sequence["Exercise"]) -> None:
        self._start_time = time.perf_counter()
        self._failures.clear()
        cases = sum(len(exercise.test_cases) for exercise in exercises)
        click.echo(
            _styled(f"Validating {len(exercises)} exercise(s), {cases} test case(s)", "cyan", self._use_color)
        )

    def on_exercise_result(self, outcome: "ExerciseOutcome", index: int, total: int) -> None:
        exercise = outcome.exercise
        label = STATUS_LABELS.get(outcome.status, outcome.status.upper())
        status_text = _styled(f"{label:<9}", STATUS_COLORS.get(outcome.status), self._use_color)
        ms = outcome.duration_s * 1000
        click.echo(f"[{index}/{total}] {status_text} {exercise.id} ({ms:.0f} ms)")
        if outcome.details and outcome.status != "passed":
            click.echo(f"    detail: {outcome.details}")
        if outcome.counts_as_failure:
            self._failures.append((index, outcome))

    def on_complete(self, outcomes: Sequence["ExerciseOutcome"]) -> None:
        duration = time.perf_counter() - self._start_time
        counts = count_statuses(outcomes)
        color = "red" if counts["failed"] or counts["error"] else "green"
        click.echo(
            _styled(
                f"Summary: total={len(outcomes)} passed={counts['passed']} failed={counts['failed']} "
                f"errors={counts['error']} tolerated={counts['tolerated']} skipped={counts['skipped']} "
                f"duration={duration:.2f}s",
                color,
                self._use_color,
            )
        )
        if self._failures:
            click.echo(_styled("Failure details:", "red", self._use_color))
            for index, outcome in self._failures:
                click.echo(f"  [{index}] {outcome.exercise.id} -> {outcome.status}")
                if outcome.report is not None:
                    _print_report_details(outcome.report, indent="    ", use_color=self._use_color)


def render_run_report(report: RunReport, *, use_color: bool = True) -> None:
    """Print a single :class:`RunReport` the way ``exercheck run`` shows it."""

    for warning in report.warnings:
        click.echo(_styled(f"warning: {warning}", "yellow", use_color))
    if report.error:
        click.echo(_styled(f"ERROR {report.error}", "red", use_color))
    for index, result in enumerate(report.results, start=1):
        status = "passed" if result.passed else "failed"
        label = _styled(f"{STATUS_LABELS[status]:<4}", STATUS_COLORS[status], use_color)
        click.echo(f"[{index}/{len(report.results)}] {label} {_case_label(result)}")
        if not result.passed:
            _print_result_details(result, indent="    ")
    if report.logs:
        click.echo("console output:")
        for line in report.logs:
            click.echo(f"  {line}")
    if report.results:
        color = "green" if report.all_passed else "red"
        click.echo(
            _styled(f"Summary: {report.passed_count}/{len(report.results)} passed", color, use_color)
        )


def _print_report_details(report: RunReport, *, indent: str, use_color: bool) -> None:
    if report.error:
        click.echo(f"{indent}error: {report.error}")
        return
    for result in report.results:
        if result.passed:
            continue
        click.echo(f"{indent}{_case_label(result)}")
        _print_result_details(result, indent=indent + "  ")


def _print_result_details(result: TestResult, *, indent: str) -> None:
    click.echo(f"{indent}expected: {describe(result.expected_output)}")
    if result.has_output:
        click.echo(f"{indent}actual:   {describe(result.actual_output)}")
    if result.error:
        click.echo(f"{indent}error: {result.error}")
    elif result.mismatch:
        click.echo(f"{indent}reason: {result.mismatch}")


def _case_label(result: TestResult) -> str:
    if result.description:
        return result.description
    args = result.input if isinstance(result.input, (list, tuple)) else [result.input]
    return "(" + ", ".join(describe(arg) for arg in args) + ")"


def _styled(text: str, color: Optional[str], use_color: bool) -> str:
    if not use_color or not color:
        return text
    return click.style(text, fg=color)
