from __future__ import annotations

from exercheck.core.models import CandidateFunction, TestCase
from exercheck.core.resolver import resolve


def _candidate(name: str, arity: int) -> CandidateFunction:
    return CandidateFunction(name=name, arity=arity, value=lambda *args: None)


def _case(args, description=None) -> TestCase:
    return TestCase(input=args, expected_output=None, description=description)


def test_single_candidate_is_always_used() -> None:
    only = _candidate("solve", 3)
    assert resolve([only], _case([1])) is only


def test_no_candidates() -> None:
    assert resolve([], _case([1])) is None


def test_description_prefix_wins_over_arity() -> None:
    helper = _candidate("isNested", 1)
    main = _candidate("flattenDeep", 1)
    case = _case([[1, [2]]], "flattenDeep handles nesting")
    assert resolve([helper, main], case) is main


def test_description_match_is_case_insensitive_and_prefers_longest() -> None:
    short = _candidate("sum", 1)
    longer = _candidate("sumAll", 1)
    assert resolve([short, longer], _case([[1]], "SUMALL of a list")) is longer
    assert resolve([short, longer], _case([[1]], "sum of a list")) is short


def test_equal_length_matches_keep_earlier_candidate() -> None:
    first = _candidate("calc", 1)
    second = _candidate("Calc", 1)
    assert resolve([first, second], _case([1], "calc twice")) is first


def test_preferred_name_then_arity() -> None:
    unary = _candidate("negate", 1)
    binary = _candidate("add", 2)
    assert resolve([unary, binary], _case([1, 2])) is binary
    assert resolve([unary, binary], _case([1, 2]), preferred="negate") is unary
    assert resolve([unary, binary], _case([1, 2]), preferred="missing") is binary


def test_scalar_input_counts_as_one_argument() -> None:
    unary = _candidate("negate", 1)
    binary = _candidate("add", 2)
    assert resolve([binary, unary], _case(4)) is unary


def test_unresolvable_case() -> None:
    assert resolve([_candidate("a", 1), _candidate("b", 2)], _case([1, 2, 3])) is None
