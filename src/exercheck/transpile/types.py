"""Skip over TypeScript type syntax in a token stream.

Nothing here builds a type representation; each function only returns the
index of the first token after the construct so the caller can delete the
covered span. Malformed input raises :class:`TypeSyntaxError`.
"""
from __future__ import annotations

from typing import Callable, Optional

from .lexer import EOF, IDENT, NUMBER, PRIVATE, PUNCT, STRING, TEMPLATE, TEMPLATE_HEAD, TokenList

TYPE_OPERATORS = {"keyof", "typeof", "readonly", "unique", "infer"}

# Tokens that can never begin a type; a type operator followed by one of
# these is being used as a plain name (``keyof`` as a property, etc.).
_NOT_A_TYPE_START = {",", ">", ")", "=", ";", "]", "}", "|", "&", ":", "?", "=>", "."}


class TypeSyntaxError(Exception):
    def __init__(self, index: int, message: str = "Type expected") -> None:
        super().__init__(message)
        self.index = index
        self.message = message


def skip_type(tokens: TokenList, i: int, *, conditional: bool = True) -> int:
    if tokens[i].is_punct("|", "&"):
        i += 1
    while True:
        i = _skip_operand(tokens, i)
        if tokens[i].is_punct("|", "&"):
            i += 1
            continue
        break
    if conditional and tokens[i].is_ident("extends") and not tokens[i].nl_before:
        i = skip_type(tokens, i + 1, conditional=False)
        i = _expect(tokens, i, "?")
        i = skip_type(tokens, i)
        i = _expect(tokens, i, ":")
        i = skip_type(tokens, i)
    return i


def skip_type_args(tokens: TokenList, i: int) -> int:
    """Skip ``<T, U>`` starting at the ``<`` token."""

    i = _expect(tokens, i, "<")
    if tokens[i].is_punct(">"):
        raise TypeSyntaxError(i, "Type argument list cannot be empty")
    while True:
        i = skip_type(tokens, i)
        if tokens[i].is_punct(","):
            i += 1
            if tokens[i].is_punct(">"):
                return i + 1
            continue
        return _expect(tokens, i, ">")


def skip_type_params(tokens: TokenList, i: int) -> int:
    """Skip ``<T extends X = Y, ...>`` starting at the ``<`` token."""

    i = _expect(tokens, i, "<")
    while True:
        while tokens[i].is_ident("const", "in", "out") and tokens[i + 1].kind == IDENT:
            i += 1
        if tokens[i].kind != IDENT:
            raise TypeSyntaxError(i, "Type parameter name expected")
        i += 1
        if tokens[i].is_ident("extends"):
            i = skip_type(tokens, i + 1)
        if tokens[i].is_punct("="):
            i = skip_type(tokens, i + 1)
        if tokens[i].is_punct(","):
            i += 1
            if tokens[i].is_punct(">"):
                return i + 1
            continue
        return _expect(tokens, i, ">")


def attempt(skipper: Callable[..., int], tokens: TokenList, i: int, **kwargs) -> Optional[int]:
    """Run ``skipper`` and return ``None`` instead of raising on malformed types."""

    try:
        return skipper(tokens, i, **kwargs)
    except TypeSyntaxError:
        return None


def _expect(tokens: TokenList, i: int, value: str) -> int:
    if not tokens[i].is_punct(value):
        raise TypeSyntaxError(i, f"'{value}' expected")
    return i + 1


def _starts_type(tokens: TokenList, i: int) -> bool:
    token = tokens[i]
    if token.kind == EOF:
        return False
    return not (token.kind == PUNCT and token.value in _NOT_A_TYPE_START)


def _skip_function_type(tokens: TokenList, i: int) -> int:
    if tokens[i].is_punct("<"):
        i = skip_type_params(tokens, i)
    if not tokens[i].is_punct("("):
        raise TypeSyntaxError(i, "'(' expected")
    i = _expect(tokens, tokens.match[i] + 1, "=>")
    return skip_type(tokens, i)


def _skip_operand(tokens: TokenList, i: int) -> int:
    token = tokens[i]

    if token.kind == IDENT and token.value in TYPE_OPERATORS and _starts_type(tokens, i + 1):
        if token.value == "infer":
            if tokens[i + 1].kind != IDENT:
                raise TypeSyntaxError(i + 1)
            return _skip_postfix(tokens, i + 2)
        return _skip_operand(tokens, i + 1)

    if token.is_ident("abstract") and tokens[i + 1].is_ident("new"):
        i += 1
        token = tokens[i]
    if token.is_ident("new") and tokens[i + 1].is_punct("(", "<"):
        return _skip_function_type(tokens, i + 1)

    if token.is_ident("asserts") and tokens[i + 1].kind == IDENT and not tokens[i + 1].nl_before:
        i += 2
        if tokens[i].is_ident("is"):
            return skip_type(tokens, i + 1)
        return i

    if token.is_punct("<"):
        return _skip_function_type(tokens, i)

    if token.is_punct("("):
        close = tokens.match[i]
        if tokens[close + 1].is_punct("=>"):
            return skip_type(tokens, close + 2)
        inner = skip_type(tokens, i + 1)
        if inner != close:
            raise TypeSyntaxError(inner, "')' expected")
        return _skip_postfix(tokens, close + 1)

    if token.is_punct("{", "["):
        return _skip_postfix(tokens, tokens.match[i] + 1)

    if token.kind == IDENT:
        i += 1
        while tokens[i].is_punct(".") and tokens[i + 1].kind in (IDENT, PRIVATE):
            i += 2
        if tokens[i].is_punct("<") and not tokens[i].nl_before:
            i = skip_type_args(tokens, i)
        if tokens[i].is_ident("is") and not tokens[i].nl_before:
            return skip_type(tokens, i + 1)
        return _skip_postfix(tokens, i)

    if token.kind in (STRING, NUMBER, TEMPLATE):
        return _skip_postfix(tokens, i + 1)
    if token.kind == TEMPLATE_HEAD:
        return _skip_postfix(tokens, tokens.match[i] + 1)
    if token.is_punct("-") and tokens[i + 1].kind == NUMBER:
        return _skip_postfix(tokens, i + 2)

    raise TypeSyntaxError(i)


def _skip_postfix(tokens: TokenList, i: int) -> int:
    # T[] and T["key"]; a bracket on a new line starts the next statement
    while tokens[i].is_punct("[") and not tokens[i].nl_before:
        i = tokens.match[i] + 1
    return i
