"""Lowering of ``enum`` declarations to plain JavaScript objects."""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import List, Optional, Union

from .lexer import IDENT, NUMBER, STRING, TEMPLATE, TokenList

Number = Union[int, float]


@dataclass
class EnumMember:
    name: str
    line: int
    expression: str
    value: Optional[Number] = None
    is_string: bool = False


def _literal_number(text: str) -> Optional[Number]:
    negative = text.startswith("-")
    body = text[1:].strip() if negative else text
    body = body.replace("_", "")
    try:
        if body[:2].lower() in ("0x", "0o", "0b"):
            value: Number = int(body, 0)
        else:
            value = float(body)
            if value.is_integer() and "." not in body and "e" not in body.lower():
                value = int(value)
    except ValueError:
        return None
    return -value if negative else value


def _render_number(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


def parse_enum(tokens: TokenList, enum_name: str, open_index: int) -> List[EnumMember]:
    """Read the members between ``{`` at ``open_index`` and its matching ``}``."""

    close = tokens.match[open_index]
    members: List[EnumMember] = []
    previous: Optional[EnumMember] = None
    i = open_index + 1
    while i < close:
        token = tokens[i]
        if token.kind == IDENT:
            name = token.value
        elif token.kind == STRING:
            name = token.value[1:-1]
        else:
            raise tokens.error("Enum member name expected", i)
        line = tokens.position(token.start)[0]
        i += 1

        if tokens[i].is_punct("="):
            start = i + 1
            i = start
            while i < close and not tokens[i].is_punct(","):
                i = tokens.match.get(i, i) + 1
            if i == start:
                raise tokens.error("Expression expected", start)
            member = _initialized_member(tokens, enum_name, members, name, line, start, i)
        elif previous is None:
            member = EnumMember(name=name, line=line, expression="0", value=0)
        elif previous.value is not None:
            value = previous.value + 1
            member = EnumMember(name=name, line=line, expression=_render_number(value), value=value)
        elif previous.is_string:
            raise tokens.error("Enum member must have initializer", i - 1)
        else:
            member = EnumMember(name=name, line=line, expression=f"{_reference(enum_name, previous.name)} + 1")

        members.append(member)
        previous = member
        if tokens[i].is_punct(","):
            i += 1
        elif i != close:
            raise tokens.error("',' expected", i)
    return members


def _initialized_member(
    tokens: TokenList,
    enum_name: str,
    earlier: List[EnumMember],
    name: str,
    line: int,
    start: int,
    stop: int,
) -> EnumMember:
    source = tokens.source
    text = source[tokens[start].start:tokens[stop - 1].end]
    if stop - start == 1 and tokens[start].kind in (STRING, TEMPLATE):
        return EnumMember(name=name, line=line, expression=text, is_string=True)
    numeric = None
    if stop - start == 1 and tokens[start].kind == NUMBER:
        numeric = _literal_number(text)
    elif stop - start == 2 and tokens[start].is_punct("-") and tokens[start + 1].kind == NUMBER:
        numeric = _literal_number("-" + tokens[start + 1].value)
    if numeric is not None:
        return EnumMember(name=name, line=line, expression=text, value=numeric)

    known = {member.name for member in earlier}
    pieces: List[str] = []
    cursor = tokens[start].start
    for k in range(start, stop):
        token = tokens[k]
        if token.kind == IDENT and token.value in known and not tokens[k - 1].is_punct(".", "?."):
            pieces.append(source[cursor:token.start])
            pieces.append(_reference(enum_name, token.value))
            cursor = token.end
    pieces.append(source[cursor:tokens[stop - 1].end])
    return EnumMember(name=name, line=line, expression="".join(pieces))


def _reference(enum_name: str, member: str) -> str:
    if member.isidentifier():
        return f"{enum_name}.{member}"
    return f"{enum_name}[{json.dumps(member)}]"


def render_enum(name: str, members: List[EnumMember], start_line: int, close_line: int) -> str:
    """Emit the IIFE form, keeping each member on the line it was declared on."""

    parts = [f"var {name}; (function ({name}) {{"]
    line = start_line
    for member in members:
        key = json.dumps(member.name)
        if member.is_string:
            statement = f"{name}[{key}] = {member.expression};"
        else:
            statement = f"{name}[{name}[{key}] = {member.expression}] = {key};"
        if member.line > line:
            parts.append("\n" * (member.line - line))
            line = member.line
        else:
            parts.append(" ")
        parts.append(statement)
    if close_line > line:
        parts.append("\n" * (close_line - line))
    else:
        parts.append(" ")
    parts.append(f"}})({name} || ({name} = {{}}));")
    return "".join(parts)
