"""Reporting exports."""
from .base import ReportManager, Reporter
from .json_reporter import JsonReporter
from .schema import REPORT_SCHEMA, RUN_REPORT_SCHEMA, SCHEMA_VERSION
from .terminal import TerminalReporter, render_run_report

__all__ = [
    "ReportManager",
    "Reporter",
    "JsonReporter",
    "REPORT_SCHEMA",
    "RUN_REPORT_SCHEMA",
    "SCHEMA_VERSION",
    "TerminalReporter",
    "render_run_report",
]
