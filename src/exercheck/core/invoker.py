"""Invoke one resolved function for one test case and judge the outcome."""
from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable

import structlog

from ..errors import SandboxError, SnippetError, SnippetTimeout
from .comparator import compare_values
from .models import TestResult, TestCase
from .safety import sanitize_error_message

logger = structlog.get_logger(__name__)


def format_timeout_message(timeout_s: float) -> str:
    return f"Test execution timed out after {timeout_s:g} seconds"


def describe_exception(exc: BaseException) -> str:
    """Render an exception the way a thrown JS ``Error`` would be reported."""

    if isinstance(exc, SnippetError):
        return str(exc)
    message = str(exc)
    name = type(exc).__name__
    if type(exc) is Exception:
        return message or name
    return f"{name}: {message}" if message else name


def invoke_and_compare(fn: Callable[..., Any], test_case: TestCase, *, timeout_s: float) -> TestResult:
    def failed(error: str) -> TestResult:
        return TestResult(
            input=test_case.input,
            expected_output=test_case.expected_output,
            passed=False,
            error=sanitize_error_message(error),
            description=test_case.description,
        )

    try:
        actual = fn(*test_case.arguments())
        if inspect.isawaitable(actual):
            actual = _await(actual, timeout_s)
    except (SnippetTimeout, asyncio.TimeoutError):
        return failed(format_timeout_message(timeout_s))
    except SandboxError as exc:
        logger.warning("case.sandbox_failure", error=str(exc))
        return failed(f"Sandbox error: {exc}")
    except Exception as exc:  # snippet failures of any kind become case errors
        return failed(describe_exception(exc))

    comparison = compare_values(actual, test_case.expected_output)
    return TestResult(
        input=test_case.input,
        expected_output=test_case.expected_output,
        passed=comparison.passed,
        actual_output=actual,
        description=test_case.description,
        mismatch=comparison.message,
    )


def _await(awaitable: Any, timeout_s: float) -> Any:
    async def _wait() -> Any:
        return await asyncio.wait_for(awaitable, timeout=timeout_s)

    return asyncio.run(_wait())
