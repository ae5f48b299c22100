"""Tokenizer for TypeScript sources.

The lexer keeps exact source offsets for every token so the transpiler can
edit the original text instead of re-printing it. A few decisions are
specific to that use:

* ``>`` is always a single-character token. Generic closers such as
  ``Array<Array<T>>`` never need to be split, and the comparison or shift
  operators spelled with several ``>`` characters are irrelevant to the
  edits being made.
* Template literals are split into head/middle/tail pieces around each
  ``${ ... }`` substitution so the expressions inside are tokenized too.
* Bracket pairs are matched while lexing; an unbalanced source fails fast.
"""
from __future__ import annotations

import bisect
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..errors import CompileError

IDENT = "ident"
PRIVATE = "private"
NUMBER = "number"
STRING = "string"
TEMPLATE = "template"
TEMPLATE_HEAD = "template_head"
TEMPLATE_MIDDLE = "template_middle"
TEMPLATE_TAIL = "template_tail"
REGEX = "regex"
PUNCT = "punct"
EOF = "eof"

_PUNCTUATORS = sorted(
    [
        "...", "===", "!==", "**=", "<<=", "&&=", "||=", "??=",
        "=>", "==", "!=", "<=", "&&", "||", "??", "?.", "++", "--",
        "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "**", "<<",
        "{", "}", "(", ")", "[", "]", ";", ",", "<", ">", "+", "-",
        "*", "/", "%", "&", "|", "^", "!", "~", "?", ":", "=", ".", "@",
    ],
    key=len,
    reverse=True,
)

_IDENT_RE = re.compile(r"(?:[^\W\d]|\$)[\w$]*")
_NUMBER_RE = re.compile(
    r"0[xX][0-9a-fA-F_]+n?|0[oO][0-7_]+n?|0[bB][01_]+n?"
    r"|(?:\d[\d_]*(?:\.[\d_]*)?|\.\d[\d_]*)(?:[eE][+-]?\d[\d_]*)?n?"
)

_LINE_BREAKS = "\n\r\u2028\u2029"
_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")": "(", "]": "[", "}": "{"}

# Keywords after which a slash starts a regular expression.
_REGEX_AFTER_KEYWORDS = {
    "return", "typeof", "instanceof", "in", "of", "new", "delete", "void",
    "throw", "case", "do", "else", "yield", "await",
}


@dataclass
class Token:
    kind: str
    value: str
    start: int
    end: int
    nl_before: bool = False

    def is_ident(self, *names: str) -> bool:
        return self.kind == IDENT and (not names or self.value in names)

    def is_punct(self, *values: str) -> bool:
        return self.kind == PUNCT and (not values or self.value in values)

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.value!r}, {self.start})"


class TokenList:
    """Tokens of one source plus bracket matches and line lookup."""

    def __init__(self, source: str, tokens: List[Token], match: Dict[int, int]) -> None:
        self.source = source
        self.tokens = tokens
        self.match = match
        self._line_starts = [0] + [m.end() for m in re.finditer(r"\r\n|[\n\r\u2028\u2029]", source)]

    def __len__(self) -> int:
        return len(self.tokens)

    def __getitem__(self, index: int) -> Token:
        if index >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[index]

    def position(self, offset: int) -> Tuple[int, int]:
        line = bisect.bisect_right(self._line_starts, offset) - 1
        return line + 1, offset - self._line_starts[line] + 1

    def error(self, message: str, index: int) -> CompileError:
        line, column = self.position(self[index].start)
        return CompileError(message, line, column)


class _Lexer:
    def __init__(self, source: str) -> None:
        self.source = source
        self.pos = 0
        self.tokens: List[Token] = []
        self.match: Dict[int, int] = {}
        # entries: (opening char or "${", index of the opening token)
        self.stack: List[Tuple[str, int]] = []

    def fail(self, message: str, offset: int) -> CompileError:
        line, column = TokenList(self.source, [], {}).position(offset)
        return CompileError(message, line, column)

    def run(self) -> TokenList:
        source = self.source
        if source.startswith("#!"):
            self.pos = self._line_end(0)
        while True:
            newline = self._skip_trivia()
            if self.pos >= len(source):
                break
            self._read_token(newline)
        if self.stack:
            opener, index = self.stack[-1]
            token = self.tokens[index]
            label = "template substitution" if opener == "${" else f"'{opener}'"
            raise self.fail(f"Unclosed {label}", token.start)
        self.tokens.append(Token(EOF, "", len(source), len(source), True))
        return TokenList(source, self.tokens, self.match)

    def _line_end(self, pos: int) -> int:
        source = self.source
        while pos < len(source) and source[pos] not in _LINE_BREAKS:
            pos += 1
        return pos

    def _skip_trivia(self) -> bool:
        source = self.source
        newline = False
        while self.pos < len(source):
            ch = source[self.pos]
            if ch in _LINE_BREAKS:
                newline = True
                self.pos += 1
            elif ch.isspace() or ch == "\ufeff":
                self.pos += 1
            elif source.startswith("//", self.pos):
                self.pos = self._line_end(self.pos)
            elif source.startswith("/*", self.pos):
                end = source.find("*/", self.pos + 2)
                if end < 0:
                    raise self.fail("Unterminated comment", self.pos)
                if any(c in _LINE_BREAKS for c in source[self.pos:end]):
                    newline = True
                self.pos = end + 2
            else:
                break
        return newline

    def _regex_allowed(self) -> bool:
        if not self.tokens:
            return True
        prev = self.tokens[-1]
        if prev.kind == PUNCT:
            return prev.value not in (")", "]", "}", "++", "--")
        if prev.kind == IDENT:
            return prev.value in _REGEX_AFTER_KEYWORDS
        return prev.kind in (TEMPLATE_HEAD, TEMPLATE_MIDDLE)

    def _emit(self, kind: str, start: int, end: int, newline: bool) -> int:
        self.tokens.append(Token(kind, self.source[start:end], start, end, newline))
        self.pos = end
        return len(self.tokens) - 1

    def _read_token(self, newline: bool) -> None:
        source = self.source
        start = self.pos
        ch = source[start]

        if ch in "'\"":
            self._emit(STRING, start, self._scan_string(start), newline)
            return
        if ch == "`":
            kind, end = self._scan_template(start + 1, head=True)
            index = self._emit(kind, start, end, newline)
            if kind == TEMPLATE_HEAD:
                self.stack.append(("${", index))
            return
        if ch.isdigit() or (ch == "." and start + 1 < len(source) and source[start + 1].isdigit()):
            match = _NUMBER_RE.match(source, start)
            self._emit(NUMBER, start, match.end(), newline)
            return
        if ch == "#":
            match = _IDENT_RE.match(source, start + 1)
            if not match:
                raise self.fail("Invalid character '#'", start)
            self._emit(PRIVATE, start, match.end(), newline)
            return
        match = _IDENT_RE.match(source, start)
        if match:
            self._emit(IDENT, start, match.end(), newline)
            return
        if ch == "/" and self._regex_allowed():
            self._emit(REGEX, start, self._scan_regex(start), newline)
            return
        if ch == "}" and self.stack and self.stack[-1][0] == "${":
            head_index = self.stack.pop()[1]
            kind, end = self._scan_template(start + 1, head=False)
            index = self._emit(kind, start, end, newline)
            if kind == TEMPLATE_MIDDLE:
                self.stack.append(("${", head_index))
            else:
                self.match[head_index] = index
            return
        for punct in _PUNCTUATORS:
            if source.startswith(punct, start):
                if punct == "?." and start + 2 < len(source) and source[start + 2].isdigit():
                    continue
                index = self._emit(PUNCT, start, start + len(punct), newline)
                self._track_bracket(punct, index)
                return
        raise self.fail(f"Invalid character {ch!r}", start)

    def _track_bracket(self, punct: str, index: int) -> None:
        if punct in _OPENERS:
            self.stack.append((punct, index))
        elif punct in _CLOSERS:
            if not self.stack or self.stack[-1][0] != _CLOSERS[punct]:
                raise self.fail(f"Unexpected '{punct}'", self.tokens[index].start)
            self.match[self.stack.pop()[1]] = index

    def _scan_string(self, start: int) -> int:
        source = self.source
        quote = source[start]
        pos = start + 1
        while pos < len(source):
            ch = source[pos]
            if ch == "\\":
                pos += 2
                continue
            if ch == quote:
                return pos + 1
            if ch in "\n\r":
                break
            pos += 1
        raise self.fail("Unterminated string literal", start)

    def _scan_template(self, pos: int, head: bool) -> Tuple[str, int]:
        source = self.source
        start = pos
        while pos < len(source):
            ch = source[pos]
            if ch == "\\":
                pos += 2
                continue
            if ch == "`":
                return (TEMPLATE if head else TEMPLATE_TAIL), pos + 1
            if source.startswith("${", pos):
                return (TEMPLATE_HEAD if head else TEMPLATE_MIDDLE), pos + 2
            pos += 1
        raise self.fail("Unterminated template literal", start - 1)

    def _scan_regex(self, start: int) -> int:
        source = self.source
        pos = start + 1
        in_class = False
        while pos < len(source):
            ch = source[pos]
            if ch in _LINE_BREAKS:
                break
            if ch == "\\":
                pos += 2
                continue
            if ch == "[":
                in_class = True
            elif ch == "]":
                in_class = False
            elif ch == "/" and not in_class:
                pos += 1
                while pos < len(source) and (source[pos].isalnum() or source[pos] in "_$"):
                    pos += 1
                return pos
            pos += 1
        raise self.fail("Unterminated regular expression literal", start)


def tokenize(source: str) -> TokenList:
    """Split ``source`` into tokens, raising :class:`CompileError` on lexical errors."""

    return _Lexer(source).run()


def ident_value(token: Optional[Token]) -> Optional[str]:
    if token is not None and token.kind == IDENT:
        return token.value
    return None
