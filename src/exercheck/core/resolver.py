"""Pick which harvested function answers a given test case."""
from __future__ import annotations

from typing import Optional, Sequence

from .models import CandidateFunction, TestCase

UNRESOLVED_MESSAGE = "Could not find a matching function for this test case"


def resolve(
    candidates: Sequence[CandidateFunction],
    test_case: TestCase,
    preferred: Optional[str] = None,
) -> Optional[CandidateFunction]:
    """Return the candidate for ``test_case`` or ``None``.

    Order of precedence: a lone candidate, the longest name that prefixes
    the case description (earliest on ties), the preferred name, and
    finally the first candidate whose arity equals the argument count.
    """

    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]

    by_description = _match_description(candidates, test_case.description)
    if by_description is not None:
        return by_description

    if preferred:
        for candidate in candidates:
            if candidate.name == preferred:
                return candidate

    arg_count = len(test_case.arguments())
    for candidate in candidates:
        if candidate.arity == arg_count:
            return candidate
    return None


def _match_description(
    candidates: Sequence[CandidateFunction], description: Optional[str]
) -> Optional[CandidateFunction]:
    if not description:
        return None
    lowered = description.lower()
    best: Optional[CandidateFunction] = None
    for candidate in candidates:
        if not lowered.startswith(candidate.name.lower()):
            continue
        # strict comparison keeps the earlier candidate on equal length
        if best is None or len(candidate.name) > len(best.name):
            best = candidate
    return best
