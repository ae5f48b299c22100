"""Run every bundled reference solution against its own test cases."""
from __future__ import annotations

import fnmatch
import time
from typing import List, Optional, Sequence

import click
import structlog
from colorama import init as colorama_init

from ..config import HarnessSettings
from ..core.runner import SessionFactory, TestRunner
from ..core.safety import has_browser_apis
from ..errors import CompileError
from ..reporting import JsonReporter, ReportManager, Reporter, TerminalReporter
from ..transpile import transpile
from .models import Catalog, Exercise, ExerciseOutcome, ValidateOptions

logger = structlog.get_logger(__name__)


def validate_catalog(
    catalog: Catalog,
    options: ValidateOptions,
    *,
    report_format: str = "terminal",
    report_path: Optional[str] = None,
    use_color: bool = True,
    settings: Optional[HarnessSettings] = None,
    session_factory: Optional[SessionFactory] = None,
) -> int:
    """Validate the selected exercises; returns process exit code (0 success, 1 failures)."""

    colorama_init()
    selected = select_exercises(catalog, options)
    if options.list_only:
        for exercise in selected:
            click.echo(f"{exercise.id}\t{exercise.category}\t{exercise.difficulty}\t{exercise.title}")
        return 0
    if not selected:
        click.echo("No exercises matched the provided filters.")
        return 1

    runner = TestRunner(settings=settings, session_factory=session_factory)
    manager = ReportManager(_build_reporters(report_format, report_path, use_color))
    manager.start(selected)
    outcomes: List[ExerciseOutcome] = []
    for index, exercise in enumerate(selected, start=1):
        outcome = validate_exercise(runner, exercise, check_starter=options.check_starter)
        logger.info("validate.exercise", exercise=exercise.id, status=outcome.status)
        outcomes.append(outcome)
        manager.handle_result(outcome, index, len(selected))
    manager.complete(outcomes)
    return 1 if any(outcome.counts_as_failure for outcome in outcomes) else 0


def select_exercises(catalog: Catalog, options: ValidateOptions) -> List[Exercise]:
    matches: List[Exercise] = []
    for exercise in catalog:
        if options.ids and not any(fnmatch.fnmatchcase(exercise.id, pattern) for pattern in options.ids):
            continue
        if options.categories and exercise.category not in options.categories:
            continue
        if options.tags and not set(options.tags) & set(exercise.tags):
            continue
        matches.append(exercise)
    return matches


def validate_exercise(runner: TestRunner, exercise: Exercise, *, check_starter: bool = False) -> ExerciseOutcome:
    started = time.perf_counter()

    def outcome(status: str, details: str = "", report=None) -> ExerciseOutcome:
        return ExerciseOutcome(
            exercise=exercise,
            status=status,
            report=report,
            details=details,
            duration_s=time.perf_counter() - started,
        )

    if check_starter and exercise.starter_code.strip():
        try:
            transpile(exercise.starter_code)
        except CompileError as exc:
            return outcome("error", f"starter code: {exc}")

    if exercise.solution is None:
        return outcome("skipped", "no reference solution")

    report = runner.run(exercise.solution, exercise.test_cases, solution_function_name=exercise.function)
    if report.all_passed:
        return outcome("passed", report=report)

    details = report.error or _failure_summary(report.results)
    if exercise.host_apis or has_browser_apis(exercise.solution):
        return outcome("tolerated", f"requires host APIs: {details}", report)
    if report.error:
        return outcome("error", details, report)
    return outcome("failed", details, report)


def _failure_summary(results: Sequence) -> str:
    failed = [result for result in results if not result.passed]
    first = failed[0] if failed else None
    text = f"{len(failed)}/{len(results)} case(s) failed"
    if first is not None:
        reason = first.error or first.mismatch
        label = first.description or "case"
        if reason:
            text += f"; {label}: {reason}"
    return text


def _build_reporters(report_format: str, report_path: Optional[str], use_color: bool) -> List[Reporter]:
    if report_format == "terminal":
        return [TerminalReporter(use_color=use_color)]
    if report_format == "json":
        return [JsonReporter(report_path)]
    raise ValueError(f"Unknown report format '{report_format}'")
