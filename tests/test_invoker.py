from __future__ import annotations

import asyncio

from exercheck.core.invoker import describe_exception, format_timeout_message, invoke_and_compare
from exercheck.core.models import TestCase
from exercheck.core.values import UNDEFINED
from exercheck.errors import SandboxError, SnippetError, SnippetTimeout


def _case(args, expected, description=None) -> TestCase:
    return TestCase(input=args, expected_output=expected, description=description)


def test_matching_output_passes() -> None:
    result = invoke_and_compare(lambda a, b: a + b, _case([2, 3], 5), timeout_s=1)
    assert result.passed
    assert result.actual_output == 5
    assert result.error is None


def test_mismatch_records_actual_value() -> None:
    result = invoke_and_compare(lambda a, b: a - b, _case([2, 3], 5, "add"), timeout_s=1)
    assert not result.passed
    assert result.actual_output == -1
    assert result.mismatch == "$: expected 5, got -1"
    assert result.description == "add"


def test_snippet_errors_become_case_errors() -> None:
    def boom(*_):
        raise SnippetError("TypeError: x is not a function")

    result = invoke_and_compare(boom, _case([1], 1), timeout_s=1)
    assert not result.passed
    assert result.error == "TypeError: x is not a function"
    assert not result.has_output
    assert "actual_output" not in result.to_dict()


def test_timeouts_use_the_standard_message() -> None:
    def slow(*_):
        raise SnippetTimeout("worker deadline")

    result = invoke_and_compare(slow, _case([1], 1), timeout_s=0.5)
    assert result.error == format_timeout_message(0.5) == "Test execution timed out after 0.5 seconds"


def test_sandbox_failures_are_reported_per_case() -> None:
    def crashed(*_):
        raise SandboxError("worker exited with code 137")

    result = invoke_and_compare(crashed, _case([1], 1), timeout_s=1)
    assert result.error == "Sandbox error: worker exited with code 137"


def test_awaitables_are_resolved() -> None:
    async def later(x):
        await asyncio.sleep(0)
        return x * 2

    assert invoke_and_compare(later, _case([4], 8), timeout_s=1).passed


def test_hanging_awaitable_times_out() -> None:
    async def never(_):
        await asyncio.sleep(10)

    result = invoke_and_compare(never, _case([1], 1), timeout_s=0.05)
    assert result.error == "Test execution timed out after 0.05 seconds"


def test_python_exceptions_read_like_js_errors() -> None:
    assert describe_exception(Exception("plain")) == "plain"
    assert describe_exception(ValueError("bad")) == "ValueError: bad"
    assert describe_exception(KeyError()) == "KeyError"


def test_thrown_messages_with_slashes_are_kept() -> None:
    def strict(*_):
        raise SnippetError("Date must be MM/DD/YYYY here")

    assert invoke_and_compare(strict, _case([], None), timeout_s=1).error == "Date must be MM/DD/YYYY here"


def test_returning_undefined_counts_as_output() -> None:
    result = invoke_and_compare(lambda: UNDEFINED, _case([], None), timeout_s=1)
    assert not result.passed
    assert result.has_output
    assert result.actual_output is UNDEFINED
    assert result.to_dict()["actual_output"] is None
