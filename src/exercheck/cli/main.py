"""CLI entry point for exercheck."""
from __future__ import annotations

import json
import sys
from typing import IO, Optional, Tuple

import click
from colorama import init as colorama_init
from jsonschema import validate as validate_schema

from exercheck import __version__, bootstrap
from exercheck.catalog import ValidateOptions, load_catalog, load_test_cases, validate_catalog
from exercheck.config import HarnessSettings
from exercheck.core.extractor import extract_function_names
from exercheck.core.runner import run_tests
from exercheck.errors import CompileError, ExercheckError
from exercheck.log import LOG_FORMATS, configure_logging
from exercheck.reporting import RUN_REPORT_SCHEMA, render_run_report
from exercheck.transpile import transpile


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


class CliState:
    """Holds global CLI state."""

    def __init__(self, verbose: bool, log_format: str) -> None:
        self.verbose = verbose
        self.log_format = log_format

    def settings(self, timeout_ms: Optional[int] = None) -> HarnessSettings:
        try:
            settings = HarnessSettings.from_env()
        except ValueError as exc:
            raise click.ClickException(f"Invalid environment configuration: {exc}") from exc
        if timeout_ms is not None:
            settings = settings.with_overrides(timeout_ms=timeout_ms)
        return settings


def _print_version(_: click.Context, __: click.Parameter, value: bool) -> None:
    if not value or click.get_current_context().resilient_parsing:
        return
    click.echo(f"exercheck {__version__}")
    raise click.exceptions.Exit()


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("--verbose", is_flag=True, help="Enable verbose logging output.")
@click.option(
    "--log-format",
    type=click.Choice(LOG_FORMATS),
    default="console",
    show_default=True,
    help="Renderer for diagnostic logs written to stderr.",
)
@click.option(
    "--version",
    is_flag=True,
    callback=_print_version,
    expose_value=False,
    is_eager=True,
    help="Show the exercheck version and exit.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, log_format: str) -> None:
    """Check TypeScript exercise snippets against declarative test cases."""

    bootstrap()
    configure_logging(log_format, verbose)
    ctx.obj = CliState(verbose=verbose, log_format=log_format)


@cli.command()
@click.argument("snippet", type=click.File("r", encoding="utf-8"))
@click.option(
    "--cases",
    "cases_path",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="YAML or JSON file with the test cases.",
)
@click.option("--function", "function_name", type=str, help="Function to prefer when the snippet defines several.")
@click.option("--timeout-ms", type=click.IntRange(min=1), help="Per-case timeout in milliseconds.")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON.")
@click.option("--no-color", is_flag=True, help="Disable ANSI colors in terminal output.")
@click.pass_obj
def run(
    state: CliState,
    snippet: IO[str],
    cases_path: str,
    function_name: Optional[str],
    timeout_ms: Optional[int],
    as_json: bool,
    no_color: bool,
) -> None:
    """Run SNIPPET against the test cases in --cases."""

    try:
        cases, declared_function = load_test_cases(cases_path)
    except ExercheckError as exc:
        raise click.ClickException(str(exc)) from exc
    report = run_tests(
        snippet.read(),
        cases,
        solution_function_name=function_name or declared_function,
        settings=state.settings(timeout_ms),
    )
    if as_json:
        payload = report.to_dict()
        validate_schema(instance=payload, schema=RUN_REPORT_SCHEMA)
        click.echo(json.dumps(payload, indent=2))
    else:
        colorama_init()
        render_run_report(report, use_color=not no_color)
    raise click.exceptions.Exit(0 if report.all_passed else 1)


@cli.command("validate")
@click.argument("catalog_path", metavar="CATALOG", type=click.Path(exists=True))
@click.option("--ids", "id_filters", type=str, help="Comma-separated exercise ids (supports globs).")
@click.option("--categories", "category_filters", type=str, help="Comma-separated categories to include.")
@click.option("--tags", "tag_filters", type=str, help="Comma-separated tags to include.")
@click.option("--check-starter", is_flag=True, help="Also require starter code to transpile.")
@click.option("--list", "list_only", is_flag=True, help="List matched exercises without running.")
@click.option(
    "--report",
    "report_format",
    type=click.Choice(["terminal", "json"]),
    default="terminal",
    show_default=True,
    help="Report format (terminal by default).",
)
@click.option("--report-path", type=str, help="When --report json, write to this path instead of stdout.")
@click.option("--timeout-ms", type=click.IntRange(min=1), help="Per-case timeout in milliseconds.")
@click.option("--no-color", is_flag=True, help="Disable ANSI colors in terminal output.")
@click.pass_obj
def validate(
    state: CliState,
    catalog_path: str,
    id_filters: Optional[str],
    category_filters: Optional[str],
    tag_filters: Optional[str],
    check_starter: bool,
    list_only: bool,
    report_format: str,
    report_path: Optional[str],
    timeout_ms: Optional[int],
    no_color: bool,
) -> None:
    """Run every reference solution in CATALOG against its own test cases."""

    options = ValidateOptions(
        ids=_split_csv(id_filters),
        categories=_split_csv(category_filters),
        tags=_split_csv(tag_filters),
        check_starter=check_starter,
        list_only=list_only,
    )
    try:
        catalog = load_catalog(catalog_path)
        exit_code = validate_catalog(
            catalog,
            options,
            report_format=report_format,
            report_path=report_path,
            use_color=not no_color,
            settings=state.settings(timeout_ms),
        )
    except ExercheckError as exc:
        raise click.ClickException(str(exc)) from exc
    raise click.exceptions.Exit(exit_code)


@cli.command()
@click.argument("snippet", type=click.File("r", encoding="utf-8"))
def extract(snippet: IO[str]) -> None:
    """Print the names of the functions SNIPPET defines, one per line."""

    for name in extract_function_names(_transpile_or_fail(snippet.read())):
        click.echo(name)


@cli.command("transpile")
@click.argument("snippet", type=click.File("r", encoding="utf-8"))
def transpile_command(snippet: IO[str]) -> None:
    """Print SNIPPET with its TypeScript syntax erased."""

    click.echo(_transpile_or_fail(snippet.read()), nl=False)


def _transpile_or_fail(source: str) -> str:
    try:
        return transpile(source)
    except CompileError as exc:
        raise click.ClickException(str(exc)) from exc


def main(argv: Optional[list[str]] = None) -> int:
    """Program entry point for console_scripts shim."""

    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=argv, prog_name="exercheck", standalone_mode=True)
    except click.ClickException as err:  # pragma: no cover - click handles display
        err.show()
        return err.exit_code
    except SystemExit as exc:  # click may raise exit code
        return int(exc.code or 0)
    return 0


def _split_csv(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return tuple()
    parts = [part.strip() for part in value.split(",") if part.strip()]
    return tuple(parts)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
