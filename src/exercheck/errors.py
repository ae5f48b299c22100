"""Exception hierarchy shared across exercheck subsystems."""
from __future__ import annotations

from typing import Optional


class ExercheckError(Exception):
    """Base class for all exercheck errors."""


class CompileError(ExercheckError):
    """Raised when a snippet cannot be turned into executable JavaScript."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def __str__(self) -> str:
        location = ""
        if self.line is not None:
            location = f" (line {self.line}"
            if self.column is not None:
                location += f", column {self.column}"
            location += ")"
        return f"TypeScript compilation error: {self.message}{location}"


class SandboxError(ExercheckError):
    """The execution worker failed for reasons unrelated to the snippet's logic."""


class RuntimeUnavailableError(SandboxError):
    """No JavaScript runtime could be started."""


class SnippetError(ExercheckError):
    """The snippet threw, rejected, or timed out while answering a test case."""

    def __init__(self, message: str, kind: str = "throw") -> None:
        super().__init__(message)
        self.kind = kind


class SnippetTimeout(SnippetError):
    def __init__(self, message: str) -> None:
        super().__init__(message, kind="timeout")


class CatalogError(ExercheckError, ValueError):
    """Invalid exercise catalog or test-case file."""
