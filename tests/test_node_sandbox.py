"""End-to-end checks against a real Node.js worker."""
from __future__ import annotations

import math
import shutil
import textwrap
from pathlib import Path

import pytest

from exercheck import HarnessSettings, JsFunction, UNDEFINED, run_tests
from exercheck.catalog import ValidateOptions, load_catalog, validate_catalog
from exercheck.errors import CompileError, RuntimeUnavailableError, SnippetError
from exercheck.sandbox import NodeSession, evaluate
from exercheck.transpile import transpile

requires_node = pytest.mark.skipif(shutil.which("node") is None, reason="node binary not available")
pytestmark = pytest.mark.node

EXAMPLES = Path(__file__).resolve().parents[1] / "examples"
FAST = HarnessSettings(timeout_ms=300, load_timeout_ms=2000, grace_s=1.0)


def _code(source: str) -> str:
    return textwrap.dedent(source).strip() + "\n"


def test_missing_runtime_is_reported() -> None:
    session = NodeSession(HarnessSettings(node_path="/nonexistent/bin/node"))
    with pytest.raises(RuntimeUnavailableError):
        session.start()
    session.close()


@requires_node
def test_typed_function_passes() -> None:
    report = run_tests(
        "function add(a: number, b: number): number { return a + b; }",
        [{"input": [2, 3], "expected_output": 5}, {"input": [0.1, 0.2], "expected_output": 0.30000000000000004}],
    )
    assert report.error is None
    assert report.all_passed


@requires_node
def test_thrown_errors_are_per_case() -> None:
    code = _code(
        """
        function check(value: number): number {
          if (value < 0) {
            throw new RangeError("negative input");
          }
          if (value === 0) {
            throw "plain string";
          }
          return value;
        }
        """
    )
    report = run_tests(
        code,
        [
            {"input": [-1], "expected_output": 1},
            {"input": [0], "expected_output": 0},
            {"input": [7], "expected_output": 7},
        ],
    )
    assert [result.passed for result in report.results] == [False, False, True]
    assert report.results[0].error == "RangeError: negative input"
    assert report.results[1].error == "plain string"


@requires_node
def test_helper_and_solution_are_routed_by_description() -> None:
    catalog = load_catalog(EXAMPLES / "catalog")
    exercise = catalog.get("flatten-deep")
    report = run_tests(exercise.solution, exercise.test_cases)
    assert report.all_passed, report.to_dict()


@requires_node
def test_async_functions_are_awaited() -> None:
    code = _code(
        """
        const wait = (ms: number) => new Promise<void>((resolve) => setTimeout(resolve, ms));
        async function later(x: number): Promise<number> {
          await wait(10);
          return x + 1;
        }
        async function fail(): Promise<never> {
          throw new TypeError("nope");
        }
        """
    )
    report = run_tests(
        code,
        [
            {"input": [1], "expected_output": 2, "description": "later adds one"},
            {"input": [], "expected_output": 0, "description": "fail rejects"},
        ],
    )
    assert report.results[0].passed, report.to_dict()
    assert report.results[1].error == "TypeError: nope"


@requires_node
def test_infinite_loop_times_out_and_run_continues() -> None:
    code = _code(
        """
        function spin(n: number): number {
          while (true) {}
        }
        function never(n: number): Promise<number> {
          return new Promise(() => {});
        }
        """
    )
    report = run_tests(
        code,
        [
            {"input": [1], "expected_output": 1, "description": "spin forever"},
            {"input": [1], "expected_output": 1, "description": "never settles"},
        ],
        settings=FAST,
    )
    assert [result.error for result in report.results] == [
        "Test execution timed out after 0.3 seconds",
        "Test execution timed out after 0.3 seconds",
    ]
    assert any("infinite loop" in warning for warning in report.warnings)


@requires_node
def test_hung_worker_is_restarted() -> None:
    code = _code(
        """
        async function stuck(n: number): Promise<number> {
          await null;
          while (true) {}
        }
        function ok(n: number): number {
          return n;
        }
        """
    )
    report = run_tests(
        code,
        [
            {"input": [1], "expected_output": 1, "description": "stuck in a microtask"},
            {"input": [2], "expected_output": 2, "description": "ok afterwards"},
        ],
        settings=FAST,
    )
    assert report.results[0].error == "Test execution timed out after 0.3 seconds"
    assert report.results[1].passed, report.to_dict()


@requires_node
def test_console_output_is_captured() -> None:
    code = (EXAMPLES / "snippets" / "add.ts").read_text(encoding="utf-8")
    code += 'console.warn("loaded", { ready: true });\n'
    report = run_tests(code, [{"input": [2, 3], "expected_output": 5}])
    assert report.all_passed
    assert report.logs == ["[warn] loaded { ready: true }", "adding 2 and 3"]


@requires_node
def test_top_level_errors_are_logged_not_fatal() -> None:
    code = _code(
        """
        function answer(): number {
          return 42;
        }
        throw new Error("top level");
        """
    )
    report = run_tests(code, [{"input": [], "expected_output": 42}])
    assert report.all_passed
    assert report.logs == ["[error] Uncaught top level"]


@requires_node
def test_runtime_syntax_errors_abort_the_run() -> None:
    report = run_tests("function f() {\n  return 1 2;\n}\n", [{"input": [], "expected_output": 1}])
    assert not report.all_passed
    assert report.results == []
    assert report.error.startswith("TypeScript compilation error: SyntaxError")
    assert "(line 2)" in report.error


@requires_node
def test_special_values_round_trip() -> None:
    code = _code(
        """
        function shapes(kind: string): unknown {
          switch (kind) {
            case "undefined": return undefined;
            case "nan": return NaN;
            case "map": return new Map<string, number>([["a", 1]]);
            case "set": return new Set([1, 2]);
            case "cycle": { const o: any = { name: "o" }; o.self = o; return o; }
            case "big": return 2n ** 64n;
            default: return { nested: [1, { deep: null }] };
          }
        }
        """
    )
    with NodeSession() as session:
        fn = evaluate(session, transpile(code), ["shapes"])["shapes"]
        assert fn.arity == 1
        assert fn("undefined") is UNDEFINED
        assert math.isnan(fn("nan"))
        assert fn("map") == {"a": 1}
        assert fn("set") == [1, 2]
        assert fn("cycle") == {"name": "o", "self": "[Circular]"}
        assert fn("big") == 2**64
        assert fn("other") == {"nested": [1, {"deep": None}]}


@requires_node
def test_function_arguments_and_undefined_inputs() -> None:
    code = _code(
        """
        const applyTwice = (fn: (x: number) => number, x: number) => fn(fn(x));
        function isMissing(value?: number): boolean {
          return value === undefined;
        }
        """
    )
    report = run_tests(
        code,
        [
            {"input": [JsFunction("(x) => x * 3"), 2], "expected_output": 18, "description": "applyTwice"},
            {"input": [UNDEFINED], "expected_output": True, "description": "isMissing"},
        ],
    )
    assert report.all_passed, report.to_dict()


@requires_node
def test_string_code_generation_is_disabled() -> None:
    code = "function sneaky() { return globalThis['ev' + 'al']('1 + 1'); }"
    with NodeSession() as session:
        fn = evaluate(session, code, ["sneaky"])["sneaky"]
        with pytest.raises(SnippetError) as exc:
            fn()
    assert str(exc.value).startswith("EvalError")


@requires_node
def test_syntax_errors_from_load() -> None:
    with NodeSession() as session:
        with pytest.raises(CompileError) as exc:
            session.load("let = ;", ["f"])
    assert exc.value.line == 1


@requires_node
def test_bundled_catalog_validates(capsys) -> None:
    catalog = load_catalog(EXAMPLES / "catalog")
    code = validate_catalog(catalog, ValidateOptions(), use_color=False)
    output = capsys.readouterr().out
    assert code == 0, output
    assert "TOLERATED local-storage-counter" in output
    assert "failed=0 errors=0" in output


@requires_node
def test_thrown_messages_reach_the_report_unchanged() -> None:
    code = 'function parse(text: string): Date {\n  throw new Error("Date must be MM/DD/YYYY here");\n}\n'
    report = run_tests(code, [{"input": ["13/01/2020"], "expected_output": None}])
    assert report.results[0].error == "Date must be MM/DD/YYYY here"
    assert "actual_output" not in report.to_dict()["results"][0]


@requires_node
def test_missing_return_reports_undefined() -> None:
    report = run_tests("function f(n: number) { n + 1; }", [{"input": [1], "expected_output": 2}])
    result = report.to_dict()["results"][0]
    assert result["actual_output"] is None
    assert result["mismatch"] == "$: expected 2, got undefined"
