from __future__ import annotations

import json
import textwrap
from pathlib import Path

import pytest
from click.testing import CliRunner

from exercheck import __version__
from exercheck.cli.main import cli, main

EXAMPLES = Path(__file__).resolve().parents[1] / "examples"


@pytest.fixture
def fake_node(monkeypatch, fake_session_factory):
    """Replace the Node.js worker with in-process callables."""

    def install(functions):
        session, factory = fake_session_factory(functions)
        monkeypatch.setattr("exercheck.core.runner._default_session_factory", factory)
        return session

    return install


def test_cli_help_short_flag() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["-h"])
    assert result.exit_code == 0
    assert "Usage:" in result.output
    for command in ("run", "validate", "extract", "transpile"):
        assert command in result.output


def test_cli_version() -> None:
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert result.output.strip() == f"exercheck {__version__}"


def test_main_returns_exit_code(capsys) -> None:
    assert main(["--version"]) == 0
    assert __version__ in capsys.readouterr().out


def test_cli_transpile(tmp_path) -> None:
    snippet = tmp_path / "add.ts"
    snippet.write_text("function add(a: number, b: number): number { return a + b; }\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["transpile", str(snippet)])
    assert result.exit_code == 0, result.output
    assert result.output == "function add(a, b) { return a + b; }\n"


def test_cli_transpile_error(tmp_path) -> None:
    snippet = tmp_path / "bad.ts"
    snippet.write_text("import fs from 'fs';\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["transpile", str(snippet)])
    assert result.exit_code == 1
    assert "TypeScript compilation error: Import statements are not supported" in result.output


def test_cli_extract(tmp_path) -> None:
    snippet = tmp_path / "many.ts"
    snippet.write_text(
        textwrap.dedent(
            """
            interface Shape { area(): number; }
            const square = (n: number): number => n * n;
            function area(shape: Shape): number { return shape.area(); }
            """
        ),
        encoding="utf-8",
    )
    result = CliRunner().invoke(cli, ["extract", str(snippet)])
    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == ["square", "area"]


def test_cli_run_terminal(fake_node) -> None:
    session = fake_node({"add": lambda a, b: a + b})
    result = CliRunner().invoke(
        cli,
        [
            "run",
            str(EXAMPLES / "snippets" / "add.ts"),
            "--cases",
            str(EXAMPLES / "snippets" / "add_cases.yaml"),
            "--no-color",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "[1/2] PASS small positives" in result.output
    assert "Summary: 2/2 passed" in result.output
    assert session.closed


def test_cli_run_json_and_failure_exit_code(fake_node, tmp_path) -> None:
    fake_node({"add": lambda a, b: a - b})
    cases = tmp_path / "cases.yaml"
    cases.write_text("- input: [2, 3]\n  expected_output: 5\n", encoding="utf-8")
    result = CliRunner().invoke(
        cli,
        ["run", str(EXAMPLES / "snippets" / "add.ts"), "--cases", str(cases), "--json", "--timeout-ms", "500"],
    )
    assert result.exit_code == 1
    payload = json.loads(result.output)
    assert payload["all_passed"] is False
    assert payload["results"][0]["actual_output"] == -1


def test_cli_run_reports_missing_code(fake_node, tmp_path) -> None:
    fake_node({})
    snippet = tmp_path / "empty.ts"
    snippet.write_text("", encoding="utf-8")
    cases = tmp_path / "cases.yaml"
    cases.write_text("[]\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["run", str(snippet), "--cases", str(cases), "--no-color"])
    assert result.exit_code == 1
    assert "ERROR No code provided" in result.output


def test_cli_run_invalid_cases_file(tmp_path) -> None:
    snippet = tmp_path / "add.ts"
    snippet.write_text("function add(a, b) { return a + b; }", encoding="utf-8")
    cases = tmp_path / "cases.yaml"
    cases.write_text("- expected_output: 1\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["run", str(snippet), "--cases", str(cases)])
    assert result.exit_code == 1
    assert "Test case schema validation failed" in result.output


def test_cli_validate_list() -> None:
    result = CliRunner().invoke(
        cli, ["validate", str(EXAMPLES / "catalog"), "--list", "--categories", "basics"]
    )
    assert result.exit_code == 0, result.output
    ids = [line.split("\t")[0] for line in result.output.splitlines()]
    assert ids == ["add-numbers", "greet-user", "first-or-default"]


def test_cli_validate_json_report(fake_node, tmp_path) -> None:
    fake_node({"add": lambda a, b: a + b})
    catalog = tmp_path / "catalog.yaml"
    catalog.write_text(
        textwrap.dedent(
            """
            id: add
            title: Add
            solution: "function add(a: number, b: number) { return a + b; }"
            test_cases:
              - input: [1, 2]
                expected_output: 3
            """
        ),
        encoding="utf-8",
    )
    report_path = tmp_path / "report.json"
    result = CliRunner().invoke(
        cli,
        ["validate", str(catalog), "--report", "json", "--report-path", str(report_path)],
    )
    assert result.exit_code == 0, result.output
    assert "JSON report written to" in result.output
    payload = json.loads(report_path.read_text(encoding="utf-8"))
    assert payload["summary"]["passed"] == 1


def test_cli_validate_bad_catalog(tmp_path) -> None:
    catalog = tmp_path / "catalog.yaml"
    catalog.write_text("id: broken\ntitle: Broken\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["validate", str(catalog)])
    assert result.exit_code == 1
    assert "Error: Exercise schema validation failed" in result.output


def test_cli_rejects_bad_environment(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("EXERCHECK_TIMEOUT_MS", "never")
    snippet = tmp_path / "add.ts"
    snippet.write_text("function add(a, b) { return a + b; }", encoding="utf-8")
    cases = tmp_path / "cases.yaml"
    cases.write_text("[]\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["run", str(snippet), "--cases", str(cases)])
    assert result.exit_code == 1
    assert "Invalid environment configuration" in result.output
