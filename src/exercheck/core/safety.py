"""Static screening of snippets before they are executed."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Tuple

MAX_ERROR_LENGTH = 500

# (pattern, message) pairs; issues block the run, warnings are reported alongside results.
BLOCKING_PATTERNS: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r"\beval\s*\("), "Use of eval() detected - this is a security risk"),
    (re.compile(r"\bFunction\s*\("), "Use of Function constructor detected - this is a security risk"),
    (re.compile(r"__proto__"), "__proto__ usage detected - this is a security risk"),
)

WARNING_PATTERNS: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r"\.innerHTML\s*="), "innerHTML usage detected - be careful with user input"),
    (re.compile(r"document\.write"), "document.write() detected - this can cause issues"),
    (re.compile(r"window\.location"), "window.location modification detected"),
    (re.compile(r"constructor\["), "Constructor bracket access detected - potential prototype pollution"),
    (re.compile(r"\bArray\(\s*\d{6,}\s*\)"), "Large array allocation detected - may cause memory issues"),
)

_WHILE_TRUE = re.compile(r"while\s*\(\s*true\s*\)")
_FOR_EVER = re.compile(r"for\s*\(\s*;;\s*\)")
_BREAK = re.compile(r"\bbreak\b")

BROWSER_API_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r"\bfetch\s*\("),
    re.compile(r"\bwindow\."),
    re.compile(r"\bdocument\."),
    re.compile(r"\blocalStorage\."),
    re.compile(r"\bsessionStorage\."),
    re.compile(r"\bnavigator\."),
    re.compile(r"\blocation\."),
)

# Only absolute paths: "MM/DD/YYYY" or "http://host/a/b" are left alone.
_WINDOWS_PATH = re.compile(r"(?<![\w])[A-Za-z]:[\\/][^\s:]+")
_POSIX_PATH = re.compile(r"(?<![\w./])/(?:[^\s:/]+/)+[^\s:/]+")


@dataclass
class SafetyReport:
    issues: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def safe(self) -> bool:
        return not self.issues


def analyze_code_safety(code: str) -> SafetyReport:
    report = SafetyReport()
    for pattern, message in BLOCKING_PATTERNS:
        if pattern.search(code):
            report.issues.append(message)
    for pattern, message in WARNING_PATTERNS:
        if pattern.search(code):
            report.warnings.append(message)
    if not _BREAK.search(code):
        if _WHILE_TRUE.search(code):
            report.warnings.append("Potential infinite loop detected (while(true) without break)")
        if _FOR_EVER.search(code):
            report.warnings.append("Potential infinite loop detected (for(;;) without break)")
    return report


def has_browser_apis(code: str) -> bool:
    """True when the snippet relies on host APIs the sandbox does not provide."""

    return any(pattern.search(code or "") for pattern in BROWSER_API_PATTERNS)


def sanitize_error_message(message: str) -> str:
    sanitized = _WINDOWS_PATH.sub("[path]", message)
    sanitized = _POSIX_PATH.sub("[path]", sanitized)
    if len(sanitized) > MAX_ERROR_LENGTH:
        sanitized = sanitized[: MAX_ERROR_LENGTH - 3] + "..."
    return sanitized
