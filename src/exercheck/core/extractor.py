"""Lexical scan for top-level function-like bindings."""
from __future__ import annotations

import re
from typing import List

_IDENT = r"[A-Za-z_$][\w$]*"
_PARAMS = r"\([^)]*\)"
# Optional "<T>" before the parameters and ": Ret" after them, so the scan
# also works on untranspiled sources.
_TYPE_PARAMS = r"(?:<[^<>]*(?:<[^<>]*>[^<>]*)*>\s*)?"
_RETURN = r"(?:\s*:\s*[^=;{}()]+?(?:\([^)]*\)[^=;{}()]*?)*)?"
_ARROW = rf"(?:{_TYPE_PARAMS}{_PARAMS}{_RETURN}\s*=>|{_IDENT}\s*=>)"
_FUNCTION_EXPR = r"function\b"

_FUNCTION_NAMES = re.compile(
    rf"""
    \bfunction\s*\*?\s*(?P<declared>{_IDENT})
    |
    \b(?:const|let|var)\s+(?P<bound>{_IDENT})\s*(?::[^=;]+?)?=\s*(?:async\s+)?(?:{_ARROW}|{_FUNCTION_EXPR})
    |
    # also hits ternary else-arms and nested object keys; callers drop
    # names that do not bind a function at runtime
    (?<![\w$.])(?P<member>{_IDENT})\s*:\s*(?:async\s+)?(?:{_TYPE_PARAMS}{_PARAMS}\s*=>|{_FUNCTION_EXPR})
    """,
    re.VERBOSE,
)


def extract_function_names(code: str) -> List[str]:
    """Return function binding names in source order, first occurrence wins."""

    names: List[str] = []
    seen = set()
    for match in _FUNCTION_NAMES.finditer(code or ""):
        name = match.group("declared") or match.group("bound") or match.group("member")
        if name and name not in seen:
            seen.add(name)
            names.append(name)
    return names
