"""Result aggregation: the full pipeline from raw source to a RunReport."""
from __future__ import annotations

from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

import structlog

from ..config import HarnessSettings
from ..errors import CompileError, SandboxError
from ..sandbox.base import SandboxSession, evaluate
from ..transpile import transpile
from .extractor import extract_function_names
from .invoker import invoke_and_compare
from .models import CandidateFunction, RunReport, TestCase, TestResult
from .resolver import UNRESOLVED_MESSAGE, resolve
from .safety import analyze_code_safety, sanitize_error_message

logger = structlog.get_logger(__name__)

NO_CODE_MESSAGE = "No code provided"
NO_FUNCTIONS_MESSAGE = "No functions found in code. Make sure your function is defined and named correctly."

SessionFactory = Callable[[HarnessSettings], SandboxSession]
CaseLike = Union[TestCase, Mapping[str, Any]]


def _default_session_factory(settings: HarnessSettings) -> SandboxSession:
    from ..sandbox.node import NodeSession

    return NodeSession(settings)


class TestRunner:
    """Runs one snippet against a list of test cases inside a fresh session."""

    __test__ = False

    def __init__(
        self,
        settings: Optional[HarnessSettings] = None,
        session_factory: Optional[SessionFactory] = None,
    ) -> None:
        self._settings = settings or HarnessSettings()
        self._session_factory = session_factory or _default_session_factory

    @property
    def settings(self) -> HarnessSettings:
        return self._settings

    def run(
        self,
        code: str,
        test_cases: Sequence[CaseLike],
        *,
        solution_function_name: Optional[str] = None,
    ) -> RunReport:
        cases = [case if isinstance(case, TestCase) else TestCase.from_mapping(case) for case in test_cases]
        warnings: List[str] = []

        if not code or not code.strip():
            return self._abort(NO_CODE_MESSAGE)

        limit = self._settings.max_code_size
        if len(code) > limit:
            return self._abort(
                f"Code is too large ({len(code)} characters). Maximum allowed size is {limit} characters."
            )

        if self._settings.safety_checks:
            safety = analyze_code_safety(code)
            warnings.extend(safety.warnings)
            if not safety.safe:
                return self._abort(f"Code safety check failed: {'; '.join(safety.issues)}", warnings=warnings)

        try:
            javascript = transpile(code)
        except CompileError as exc:
            return self._abort(str(exc), warnings=warnings)

        names = extract_function_names(javascript)
        if not names:
            return self._abort(NO_FUNCTIONS_MESSAGE, warnings=warnings)

        logger.debug("run.started", functions=names, cases=len(cases))
        try:
            session = self._session_factory(self._settings)
        except SandboxError as exc:
            return self._abort(f"Sandbox error: {exc}", warnings=warnings)

        logs: List[str] = []
        with session:
            try:
                harvested = evaluate(session, javascript, names)
            except CompileError as exc:
                return self._abort(str(exc), warnings=warnings, logs=session.drain_logs())
            except SandboxError as exc:
                return self._abort(
                    sanitize_error_message(f"Sandbox error: {exc}"),
                    warnings=warnings,
                    logs=session.drain_logs(),
                )
            logs.extend(session.drain_logs())

            candidates = [
                CandidateFunction(name=name, arity=fn.arity, value=fn)
                for name, fn in harvested.items()
                if fn is not None
            ]
            if not candidates:
                return self._abort(NO_FUNCTIONS_MESSAGE, warnings=warnings, logs=logs)

            results = []
            for case in cases:
                results.append(self._run_case(candidates, case, solution_function_name))
                logs.extend(session.drain_logs())

        report = RunReport.from_results(results, warnings=warnings, logs=logs)
        logger.info("run.completed", passed=report.passed_count, total=len(results))
        return report

    def _run_case(
        self,
        candidates: Sequence[CandidateFunction],
        case: TestCase,
        preferred: Optional[str],
    ) -> TestResult:
        candidate = resolve(candidates, case, preferred)
        if candidate is None:
            logger.info("case.unresolved", description=case.description, candidates=[c.name for c in candidates])
            return TestResult(
                input=case.input,
                expected_output=case.expected_output,
                passed=False,
                error=UNRESOLVED_MESSAGE,
                description=case.description,
            )
        return invoke_and_compare(candidate.value, case, timeout_s=self._settings.timeout_s)

    def _abort(self, message: str, *, warnings: Sequence[str] = (), logs: Sequence[str] = ()) -> RunReport:
        logger.info("run.aborted", error=message)
        return RunReport.failure(message, warnings=warnings, logs=logs)


def run_tests(
    code: str,
    test_cases: Sequence[CaseLike],
    *,
    solution_function_name: Optional[str] = None,
    settings: Optional[HarnessSettings] = None,
    session_factory: Optional[SessionFactory] = None,
) -> RunReport:
    """Evaluate ``code`` against ``test_cases`` and return the aggregated report."""

    runner = TestRunner(settings=settings, session_factory=session_factory)
    return runner.run(code, test_cases, solution_function_name=solution_function_name)
