"""exercheck package initialization."""
from __future__ import annotations

import structlog

from .config import HarnessSettings
from .core.extractor import extract_function_names
from .core.models import CandidateFunction, RunReport, TestCase, TestResult
from .core.runner import TestRunner, run_tests
from .core.values import UNDEFINED, JsFunction
from .errors import CompileError, ExercheckError, SandboxError
from .log import configure_logging
from .transpile import transpile
from .version import __version__

__all__ = [
    "CandidateFunction",
    "CompileError",
    "ExercheckError",
    "HarnessSettings",
    "JsFunction",
    "RunReport",
    "SandboxError",
    "TestCase",
    "TestResult",
    "TestRunner",
    "UNDEFINED",
    "__version__",
    "bootstrap",
    "extract_function_names",
    "run_tests",
    "transpile",
]

_BOOTSTRAPPED = False


def bootstrap() -> None:
    """Initialize exercheck (idempotent)."""

    global _BOOTSTRAPPED
    if _BOOTSTRAPPED:
        return
    if not structlog.is_configured():
        configure_logging()
    _BOOTSTRAPPED = True
