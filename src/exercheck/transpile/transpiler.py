"""Turn TypeScript exercise snippets into plain JavaScript.

The walker follows the statement and expression structure just far enough
to tell type syntax from value syntax, and records edits against the
original text. Deleted spans keep their line breaks, so line numbers in
runtime errors still point at the learner's code.
"""
from __future__ import annotations

import re
from typing import FrozenSet, List, NamedTuple, Optional

from ..errors import CompileError
from .enums import parse_enum, render_enum
from .lexer import (
    EOF,
    IDENT,
    NUMBER,
    PRIVATE,
    PUNCT,
    REGEX,
    STRING,
    TEMPLATE,
    TEMPLATE_HEAD,
    TEMPLATE_MIDDLE,
    TEMPLATE_TAIL,
    Token,
    tokenize,
)
from .types import TypeSyntaxError, attempt, skip_type, skip_type_args, skip_type_params

TS_CLASS_MODIFIERS = {"public", "private", "protected", "readonly", "override", "abstract", "declare"}
JS_CLASS_MODIFIERS = {"static", "async", "get", "set", "accessor"}
PARAMETER_MODIFIERS = {"public", "private", "protected", "readonly", "override"}

# Keywords that leave the parser expecting an operand.
_OPERAND_KEYWORDS = {
    "return", "typeof", "instanceof", "in", "of", "new", "delete", "void", "throw",
    "case", "do", "else", "yield", "await", "extends", "if", "while", "for", "switch",
    "with", "catch", "try", "finally", "const", "let", "var", "export", "import",
    "default", "as", "satisfies",
}
# Keywords after which "{" opens an object literal rather than a block.
_OBJECT_AFTER_KEYWORDS = {
    "return", "typeof", "instanceof", "in", "of", "new", "delete", "void", "throw",
    "case", "yield", "await",
}
# Identifiers that continue an expression across a line break.
_CONTINUING_WORDS = {"in", "instanceof", "of", "as", "satisfies"}
_BLOCK_KINDS = {"module", "namespace", "global", "class", "enum", "interface", "abstract"}
_IDENTISH = re.compile(r"[\w$]")


class _Edit(NamedTuple):
    start: int
    end: int
    text: str
    keep_lines: bool


class _Transpiler:
    def __init__(self, source: str) -> None:
        self.source = source
        self.tokens = tokenize(source)
        self.match = self.tokens.match
        self.i = 0
        self.edits: List[_Edit] = []
        # token indices that close an expression after their neighbours were erased
        self.expr_ends = set()
        # first token of the innermost expression being walked
        self.floor = 0

    # -- cursor helpers -------------------------------------------------
    @property
    def tok(self) -> Token:
        return self.tokens[self.i]

    def peek(self, offset: int = 1) -> Token:
        return self.tokens[self.i + offset]

    def fail(self, message: str, index: Optional[int] = None) -> CompileError:
        return self.tokens.error(message, self.i if index is None else index)

    def expect(self, value: str) -> None:
        if not self.tok.is_punct(value):
            raise self.fail(f"'{value}' expected")
        self.i += 1

    def type_end(self, skipper, index: int) -> int:
        try:
            return skipper(self.tokens, index)
        except TypeSyntaxError as exc:
            raise self.fail(exc.message, exc.index) from None

    # -- edits ------------------------------------------------------------
    def delete(
        self,
        first: int,
        stop: int,
        *,
        through_space: bool = False,
        leading_space: bool = False,
        statement: bool = False,
    ) -> None:
        """Erase tokens ``first`` up to (not including) ``stop``."""

        if stop <= first:
            return
        tokens = self.tokens
        start = tokens[first].start
        end = tokens[stop - 1].end
        if through_space:
            end = tokens[stop].start
        if leading_space and first > 0:
            start = tokens[first - 1].end
        text = ""
        following = tokens[stop]
        if statement and (following.kind in (TEMPLATE, TEMPLATE_HEAD, REGEX) or following.is_punct("(", "[", "+", "-")):
            text = ";"
        self.edits.append(_Edit(start, end, text, True))

    def replace(self, first: int, stop: int, text: str) -> None:
        self.edits.append(_Edit(self.tokens[first].start, self.tokens[stop - 1].end, text, False))

    def insert(self, offset: int, text: str) -> None:
        self.edits.append(_Edit(offset, offset, text, False))

    def output(self) -> str:
        source = self.source
        ordered = sorted(self.edits, key=lambda e: (e.start, 0 if e.start == e.end else 1, -e.end))
        pieces: List[str] = []
        cursor = 0
        for edit in ordered:
            if edit.start < cursor:
                continue
            pieces.append(source[cursor:edit.start])
            text = edit.text
            if edit.keep_lines:
                newlines = "\n" * source.count("\n", edit.start, edit.end)
                if not text and not newlines and edit.start != edit.end:
                    left = _last_char(pieces)
                    right = source[edit.end:edit.end + 1]
                    if _IDENTISH.match(left) and _IDENTISH.match(right):
                        text = " "
                text += newlines
            pieces.append(text)
            cursor = max(cursor, edit.end)
        pieces.append(source[cursor:])
        return "".join(pieces)

    # -- classification ----------------------------------------------------
    def ends_expr(self, index: int) -> bool:
        if index < 0:
            return False
        if index in self.expr_ends:
            return True
        token = self.tokens[index]
        if token.kind == IDENT:
            return token.value not in _OPERAND_KEYWORDS
        if token.kind == PUNCT:
            return token.value in (")", "]", "}")
        return token.kind in (NUMBER, STRING, TEMPLATE, TEMPLATE_TAIL, REGEX, PRIVATE)

    def object_position(self, index: int) -> bool:
        if index == 0:
            return False
        prev = self.tokens[index - 1]
        if prev.kind == PUNCT:
            return prev.value not in (")", "]", "}", "=>", ";", "{")
        if prev.kind == IDENT:
            return prev.value in _OBJECT_AFTER_KEYWORDS
        return prev.kind in (TEMPLATE_HEAD, TEMPLATE_MIDDLE)

    def arrow_at(self, index: int) -> bool:
        close = self.match[index]
        after = self.tokens[close + 1]
        if after.is_punct("=>"):
            return True
        if after.is_punct(":"):
            end = attempt(skip_type, self.tokens, close + 2)
            return end is not None and self.tokens[end].is_punct("=>")
        return False

    def member_key_start(self, index: int) -> bool:
        token = self.tokens[index]
        return token.kind in (IDENT, STRING, NUMBER, PRIVATE) or token.is_punct("[", "*")

    # -- statements ----------------------------------------------------------
    def run(self) -> str:
        self.statements(None)
        return self.output()

    def statements(self, closer: Optional[str]) -> None:
        while self.tok.kind != EOF and not (closer and self.tok.is_punct(closer)):
            self.statement()

    def block(self) -> None:
        close = self.match[self.i]
        self.i += 1
        self.statements("}")
        self.i = close + 1

    def statement(self) -> None:
        start = self.i
        tok = self.tok
        if tok.is_punct(";"):
            self.i += 1
            return
        if tok.is_punct("@"):
            raise self.fail("Decorators are not supported")
        if tok.is_punct("{"):
            self.block()
            return
        if tok.kind == IDENT:
            handler = getattr(self, f"_stmt_{tok.value}", None)
            if handler is not None and handler(start):
                return
            if self.peek().is_punct(":") and tok.value not in _OPERAND_KEYWORDS:
                self.i += 2  # label
                return
        self.expression_statement()

    def expression_statement(self) -> None:
        start = self.i
        self.expression(frozenset({";"}), asi=True)
        if self.tok.is_punct(";"):
            self.i += 1
        elif self.i == start:
            self.i += 1

    def _stmt_interface(self, start: int) -> bool:
        name = self.peek()
        if name.kind != IDENT or name.nl_before:
            return False
        i = start + 2
        if self.tokens[i].is_punct("<"):
            i = self.type_end(skip_type_params, i)
        if self.tokens[i].is_ident("extends"):
            i += 1
            while True:
                i = self.type_end(skip_type, i)
                if not self.tokens[i].is_punct(","):
                    break
                i += 1
        if not self.tokens[i].is_punct("{"):
            raise self.fail("'{' expected", i)
        end = self.match[i] + 1
        self.delete(start, end, statement=True)
        self.i = end
        return True

    def _stmt_type(self, start: int) -> bool:
        name = self.peek()
        if name.kind != IDENT or name.nl_before or not self.peek(2).is_punct("=", "<"):
            return False
        i = start + 2
        if self.tokens[i].is_punct("<"):
            i = self.type_end(skip_type_params, i)
        if not self.tokens[i].is_punct("="):
            raise self.fail("'=' expected", i)
        i = self.type_end(skip_type, i + 1)
        if self.tokens[i].is_punct(";"):
            i += 1
        self.delete(start, i, statement=True)
        self.i = i
        return True

    def _stmt_declare(self, start: int) -> bool:
        following = self.peek()
        if following.kind != IDENT or following.nl_before:
            return False
        end = self._declaration_end(start + 1)
        self.delete(start, end, statement=True)
        self.i = end
        return True

    def _declaration_end(self, i: int) -> int:
        tokens = self.tokens
        if tokens[i].value in _BLOCK_KINDS:
            while tokens[i].kind != EOF:
                if tokens[i].is_punct("{"):
                    end = self.match[i] + 1
                    return end + 1 if tokens[end].is_punct(";") else end
                if tokens[i].is_punct(";"):
                    return i + 1
                i = self.match[i] + 1 if tokens[i].is_punct("(", "[") else i + 1
            return i
        first = i
        while tokens[i].kind != EOF:
            token = tokens[i]
            if token.is_punct(";"):
                return i + 1
            if token.is_punct("}"):
                return i
            if (
                i > first + 1
                and token.nl_before
                and token.kind == IDENT
                and token.value not in ("is", "extends", "keyof", "typeof", "infer")
                and not tokens[i - 1].is_punct(":", "|", "&", ",", "=", "=>", "<", "?", ".")
            ):
                return i
            i = self.match[i] + 1 if token.is_punct("(", "[", "{") else i + 1
        return i

    def _stmt_abstract(self, start: int) -> bool:
        if not self.peek().is_ident("class") or self.peek().nl_before:
            return False
        self.delete(start, start + 1, through_space=True)
        self.i = start + 1
        self.class_()
        return True

    def _stmt_enum(self, start: int) -> bool:
        if self.peek().kind != IDENT:
            return False
        self.enum_(start, start + 1)
        return True

    def _stmt_const(self, start: int) -> bool:
        if self.peek().is_ident("enum"):
            self.enum_(start, start + 2)
            return True
        self.var_decl()
        return True

    def _stmt_let(self, start: int) -> bool:
        following = self.peek()
        if following.kind != IDENT and not following.is_punct("{", "["):
            return False
        self.var_decl()
        return True

    _stmt_var = _stmt_let

    def _stmt_namespace(self, start: int) -> bool:
        name = self.peek()
        if name.kind not in (IDENT, STRING) or name.nl_before or not self.peek(2).is_punct("{", "."):
            return False
        raise self.fail("Namespaces and modules are not supported")

    _stmt_module = _stmt_namespace

    def _stmt_import(self, start: int) -> bool:
        following = self.peek()
        if following.is_punct("(", "."):
            return False
        after = self.peek(2)
        if following.is_ident("type") and (after.is_punct("{", "*") or (after.kind == IDENT and not after.is_ident("from"))):
            i = start + 2
            while self.tokens[i].kind not in (STRING, EOF):
                i = self.match[i] + 1 if self.tokens[i].is_punct("{") else i + 1
            end = i + 1
            if self.tokens[end].is_punct(";"):
                end += 1
            self.delete(start, end, statement=True)
            self.i = end
            return True
        raise self.fail("Import statements are not supported; exercises must be self-contained")

    def _stmt_export(self, start: int) -> bool:
        following = self.peek()
        if following.is_punct("="):
            raise self.fail("'export =' is not supported")
        if following.is_punct("*") or following.is_ident("import"):
            raise self.fail("Re-exports are not supported")
        if following.is_ident("as"):
            end = self._declaration_end(start + 1)
            self.delete(start, end, statement=True)
            self.i = end
            return True
        brace = None
        if following.is_punct("{"):
            brace = start + 1
        elif following.is_ident("type") and self.peek(2).is_punct("{"):
            brace = start + 2
        if brace is not None:
            end = self.match[brace] + 1
            if self.tokens[end].is_ident("from"):
                raise self.fail("Re-exports are not supported")
            if self.tokens[end].is_punct(";"):
                end += 1
            self.delete(start, end, statement=True)
            self.i = end
            return True
        stop = start + 2 if following.is_ident("default") else start + 1
        self.delete(start, stop, through_space=True)
        self.i = stop
        self.statement()
        return True

    def _stmt_function(self, start: int) -> bool:
        self.function_(start, statement=True)
        return True

    def _stmt_async(self, start: int) -> bool:
        following = self.peek()
        if not following.is_ident("function") or following.nl_before:
            return False
        self.function_(start, statement=True)
        return True

    def _stmt_class(self, start: int) -> bool:
        self.class_()
        return True

    def _stmt_if(self, start: int) -> bool:
        if not self.peek().is_punct("("):
            return False
        self.i += 1
        self.parens()
        self.statement()
        if self.tok.is_ident("else"):
            self.i += 1
            self.statement()
        return True

    def _stmt_while(self, start: int) -> bool:
        if not self.peek().is_punct("("):
            return False
        self.i += 1
        self.parens()
        self.statement()
        return True

    _stmt_with = _stmt_while

    def _stmt_switch(self, start: int) -> bool:
        if not self.peek().is_punct("("):
            return False
        self.i += 1
        self.parens()
        if self.tok.is_punct("{"):
            self.block()
        return True

    def _stmt_for(self, start: int) -> bool:
        self.i += 1
        if self.tok.is_ident("await"):
            self.i += 1
        if not self.tok.is_punct("("):
            raise self.fail("'(' expected")
        close = self.match[self.i]
        self.i += 1
        if self.tok.is_ident("const", "let", "var") and (self.peek().kind == IDENT or self.peek().is_punct("{", "[")):
            self.var_decl()
        self.expression()
        self.i = close + 1
        self.statement()
        return True

    def _stmt_do(self, start: int) -> bool:
        self.i += 1
        self.statement()
        if self.tok.is_ident("while"):
            self.i += 1
            self.parens()
            if self.tok.is_punct(";"):
                self.i += 1
        return True

    def _stmt_try(self, start: int) -> bool:
        if not self.peek().is_punct("{"):
            return False
        self.i += 1
        self.block()
        if self.tok.is_ident("catch"):
            self.i += 1
            if self.tok.is_punct("("):
                close = self.match[self.i]
                binding = self.i + 1
                after = self.match[binding] + 1 if self.tokens[binding].is_punct("{", "[") else binding + 1
                if self.tokens[after].is_punct(":"):
                    self.delete(after, close)
                self.i = close + 1
            self.block()
        if self.tok.is_ident("finally"):
            self.i += 1
            self.block()
        return True

    def _stmt_case(self, start: int) -> bool:
        self.i += 1
        self.expression(frozenset({":"}))
        self.expect(":")
        return True

    def _stmt_default(self, start: int) -> bool:
        if not self.peek().is_punct(":"):
            return False
        self.i += 2
        return True

    def _stmt_else(self, start: int) -> bool:
        self.i += 1
        self.statement()
        return True

    # -- declarations ----------------------------------------------------------
    def var_decl(self) -> None:
        self.i += 1
        while True:
            self.binding()
            if self.tok.is_punct("!") and self.peek().is_punct(":"):
                self.delete(self.i, self.i + 1)
                self.i += 1
            if self.tok.is_punct(":"):
                end = self.type_end(skip_type, self.i + 1)
                self.delete(self.i, end)
                self.i = end
            if self.tok.is_punct("="):
                self.i += 1
                self.expression(frozenset({",", ";"}), asi=True)
            if self.tok.is_punct(","):
                self.i += 1
                continue
            return

    def binding(self) -> None:
        tok = self.tok
        if tok.kind == IDENT:
            self.i += 1
        elif tok.is_punct("{", "["):
            self.i = self.match[self.i] + 1
        else:
            raise self.fail("Variable declaration expected")

    def enum_(self, start: int, name_index: int) -> None:
        name = self.tokens[name_index]
        if name.kind != IDENT:
            raise self.fail("Enum name expected", name_index)
        open_index = name_index + 1
        if not self.tokens[open_index].is_punct("{"):
            raise self.fail("'{' expected", open_index)
        close = self.match[open_index]
        members = parse_enum(self.tokens, name.value, open_index)
        start_line = self.tokens.position(self.tokens[start].start)[0]
        close_line = self.tokens.position(self.tokens[close].start)[0]
        self.replace(start, close + 1, render_enum(name.value, members, start_line, close_line))
        self.i = close + 1

    def function_(self, start: int, *, statement: bool) -> None:
        if self.tok.is_ident("async"):
            self.i += 1
        self.i += 1  # function
        if self.tok.is_punct("*"):
            self.i += 1
        if self.tok.kind == IDENT:
            self.i += 1
        self.signature()
        if self.tok.is_punct("{"):
            self.block()
            return
        if not statement:
            raise self.fail("Function implementation is missing")
        end = self.i + 1 if self.tok.is_punct(";") else self.i
        self.delete(start, end, statement=True)
        self.i = end

    def signature(self, *, constructor: bool = False) -> List[str]:
        """Type parameters, parameters and return type; returns parameter properties."""

        if self.tok.is_punct("<"):
            end = self.type_end(skip_type_params, self.i)
            self.delete(self.i, end)
            self.i = end
        if not self.tok.is_punct("("):
            raise self.fail("'(' expected")
        properties = self.params(constructor=constructor)
        if self.tok.is_punct(":"):
            end = self.type_end(skip_type, self.i + 1)
            self.delete(self.i, end)
            self.i = end
        return properties

    def params(self, *, constructor: bool = False) -> List[str]:
        close = self.match[self.i]
        self.i += 1
        properties: List[str] = []
        while self.i < close:
            first = self.i
            if self.tok.is_punct("@"):
                raise self.fail("Decorators are not supported")
            modifiers = []
            while (
                self.tok.kind == IDENT
                and self.tok.value in PARAMETER_MODIFIERS
                and (self.peek().kind == IDENT or self.peek().is_punct("{", "[", "..."))
            ):
                modifiers.append(self.i)
                self.i += 1
            if modifiers:
                if not constructor:
                    raise self.fail("A parameter property is only allowed in a constructor", first)
                self.delete(modifiers[0], modifiers[-1] + 1, through_space=True)
            if self.tok.is_ident("this") and self.peek().is_punct(":", ",", ")"):
                end = self.i + 1
                if self.tokens[end].is_punct(":"):
                    end = self.type_end(skip_type, end + 1)
                if self.tokens[end].is_punct(","):
                    end += 1
                self.delete(first, end, through_space=self.tokens[end - 1].is_punct(","))
                self.i = end
                continue
            if self.tok.is_punct("..."):
                self.i += 1
            name = self.tok
            self.binding()
            if modifiers and name.kind == IDENT:
                properties.append(name.value)
            if self.tok.is_punct("?"):
                self.delete(self.i, self.i + 1)
                self.i += 1
            if self.tok.is_punct(":"):
                end = self.type_end(skip_type, self.i + 1)
                self.delete(self.i, end)
                self.i = end
            if self.tok.is_punct("="):
                self.i += 1
                self.expression(frozenset({","}))
            if self.tok.is_punct(","):
                self.i += 1
            elif self.i != close:
                raise self.fail("',' expected")
        self.i = close + 1
        return properties

    def arrow(self) -> None:
        self.params()
        if self.tok.is_punct(":"):
            end = self.type_end(skip_type, self.i + 1)
            self.delete(self.i, end)
            self.i = end

    # -- classes -----------------------------------------------------------
    def class_(self) -> None:
        self.i += 1  # class
        if self.tok.kind == IDENT and not self.tok.is_ident("extends", "implements"):
            self.i += 1
        if self.tok.is_punct("<"):
            end = self.type_end(skip_type_params, self.i)
            self.delete(self.i, end)
            self.i = end
        derived = False
        if self.tok.is_ident("extends"):
            derived = True
            self.i += 1
            while not (self.tok.is_punct("{") or self.tok.is_ident("implements")):
                if self.tok.kind == EOF:
                    raise self.fail("'{' expected")
                if self.tok.is_punct("<") and self.ends_expr(self.i - 1):
                    end = attempt(skip_type_args, self.tokens, self.i)
                    if end is not None:
                        self.delete(self.i, end)
                        self.expr_ends.add(end - 1)
                        self.i = end
                        continue
                if self.tok.is_punct("(", "["):
                    self.i = self.match[self.i] + 1
                    continue
                self.i += 1
        if self.tok.is_ident("implements"):
            first = self.i
            self.i += 1
            while True:
                self.i = self.type_end(skip_type, self.i)
                if not self.tok.is_punct(","):
                    break
                self.i += 1
            self.delete(first, self.i, leading_space=True)
        if not self.tok.is_punct("{"):
            raise self.fail("'{' expected")
        self.class_body(derived)

    def class_body(self, derived: bool) -> None:
        close = self.match[self.i]
        self.i += 1
        while self.i < close:
            first = self.i
            tok = self.tok
            if tok.is_punct(";"):
                self.i += 1
                continue
            if tok.is_punct("@"):
                raise self.fail("Decorators are not supported")
            if tok.is_ident("static") and self.peek().is_punct("{"):
                self.i += 1
                self.block()
                continue

            ts_modifiers = []
            erase = False
            while (
                self.tok.kind == IDENT
                and self.tok.value in TS_CLASS_MODIFIERS | JS_CLASS_MODIFIERS
                and self.member_key_start(self.i + 1)
            ):
                if self.tok.value in ("abstract", "declare"):
                    erase = True
                if self.tok.value in TS_CLASS_MODIFIERS:
                    ts_modifiers.append(self.i)
                self.i += 1
            if self.tok.is_punct("*"):
                self.i += 1

            key = self.tok
            if key.is_punct("["):
                if self.peek().kind == IDENT and self.peek(2).is_punct(":"):
                    end = self.type_end(skip_type, self.match[self.i] + 2)
                    if self.tokens[end].is_punct(";"):
                        end += 1
                    self.delete(first, end)
                    self.i = end
                    continue
                self.brackets()
            elif key.kind in (IDENT, STRING, NUMBER, PRIVATE):
                self.i += 1
            else:
                raise self.fail("Unexpected token in class body")

            if self.tok.is_punct("?", "!"):
                self.delete(self.i, self.i + 1)
                self.i += 1

            if self.tok.is_punct("(", "<"):
                is_constructor = key.value in ("constructor", '"constructor"', "'constructor'")
                properties = self.signature(constructor=is_constructor)
                if not self.tok.is_punct("{"):
                    end = self.i + 1 if self.tok.is_punct(";") else self.i
                    self.delete(first, end)
                    self.i = end
                    continue
                if properties:
                    self.insert_parameter_properties(self.i, properties, derived)
                self.block()
            else:
                if self.tok.is_punct(":"):
                    end = self.type_end(skip_type, self.i + 1)
                    self.delete(self.i, end)
                    self.i = end
                if self.tok.is_punct("="):
                    self.i += 1
                    self.expression(frozenset({";"}), asi=True)
                if self.tok.is_punct(";"):
                    self.i += 1

            if erase:
                self.delete(first, self.i)
            else:
                for index in ts_modifiers:
                    self.delete(index, index + 1, through_space=True)
        self.i = close + 1

    def insert_parameter_properties(self, body: int, names: List[str], derived: bool) -> None:
        offset = self.tokens[body].end
        if derived:
            k = body + 1
            close = self.match[body]
            while k < close:
                token = self.tokens[k]
                if token.is_ident("super") and self.tokens[k + 1].is_punct("("):
                    end = self.match[k + 1]
                    if self.tokens[end + 1].is_punct(";"):
                        end += 1
                    offset = self.tokens[end].end
                    break
                k = self.match[k] + 1 if token.is_punct("(", "[", "{") else k + 1
        self.insert(offset, "".join(f" this.{name} = {name};" for name in names))

    # -- expressions ---------------------------------------------------------
    def expression(self, stops: FrozenSet[str] = frozenset(), *, asi: bool = False) -> None:
        start = self.i
        outer, self.floor = self.floor, start
        try:
            self._walk(start, stops, asi)
        finally:
            self.floor = outer

    def _walk(self, start: int, stops: FrozenSet[str], asi: bool) -> None:
        while True:
            tok = self.tok
            if tok.kind in (EOF, TEMPLATE_MIDDLE, TEMPLATE_TAIL):
                return
            if tok.kind == PUNCT and (tok.value in (")", "]", "}") or tok.value in stops):
                return
            if asi and self.i > start and tok.nl_before and self.ends_expr(self.i - 1) and _starts_statement(tok):
                return
            self.operand()

    def operand(self) -> None:
        tok = self.tok
        i = self.i
        after_operand = i > self.floor and self.ends_expr(i - 1)

        if tok.kind == PUNCT:
            value = tok.value
            if value == "(":
                if (not after_operand or self.tokens[i - 1].is_ident("async")) and self.arrow_at(i):
                    self.arrow()
                else:
                    self.parens()
                return
            if value == "[":
                self.brackets()
                return
            if value == "{":
                if self.object_position(i):
                    self.object_literal()
                else:
                    self.block()
                return
            if value == "<":
                handled = self.type_arguments(i) if after_operand else self.generic_arrow_or_assertion(i)
                if not handled:
                    self.i += 1
                return
            if value == "!" and after_operand and not tok.nl_before:
                self.delete(i, i + 1)
                self.expr_ends.add(i)
                self.i += 1
                return
            if value == "@":
                raise self.fail("Decorators are not supported")
            self.i += 1
            return

        if tok.kind == TEMPLATE_HEAD:
            self.i += 1
            while True:
                self.expression()
                if self.tok.kind == TEMPLATE_MIDDLE:
                    self.i += 1
                    continue
                break
            self.i += 1
            return

        if tok.kind == IDENT and not self.tokens[i - 1].is_punct(".", "?."):
            if tok.value in ("as", "satisfies") and after_operand:
                end = self.type_end(skip_type, i + 1)
                self.delete(i, end, leading_space=True)
                self.expr_ends.add(end - 1)
                self.i = end
                return
            if tok.value == "function":
                self.function_(i, statement=False)
                return
            if tok.value == "async" and self.peek().is_ident("function") and not self.peek().nl_before:
                self.function_(i, statement=False)
                return
            if tok.value == "class":
                self.class_()
                return
        self.i += 1

    def parens(self) -> None:
        close = self.match[self.i]
        self.i += 1
        self.expression()
        self.i = close + 1

    def brackets(self) -> None:
        close = self.match[self.i]
        self.i += 1
        self.expression()
        self.i = close + 1

    def type_arguments(self, index: int) -> bool:
        end = attempt(skip_type_args, self.tokens, index)
        if end is None:
            return False
        following = self.tokens[end]
        if not (following.is_punct("(") or following.kind in (TEMPLATE, TEMPLATE_HEAD)):
            return False
        self.delete(index, end)
        self.expr_ends.add(end - 1)
        self.i = end
        return True

    def generic_arrow_or_assertion(self, index: int) -> bool:
        end = attempt(skip_type_params, self.tokens, index)
        if end is not None and self.tokens[end].is_punct("(") and self.arrow_at(end):
            self.delete(index, end)
            self.i = end
            self.arrow()
            return True
        end = attempt(skip_type, self.tokens, index + 1)
        if end is not None and self.tokens[end].is_punct(">"):
            self.delete(index, end + 1, through_space=True)
            self.i = end + 1
            return True
        return False

    def object_literal(self) -> None:
        close = self.match[self.i]
        self.i += 1
        while self.i < close:
            tok = self.tok
            if tok.is_punct(","):
                self.i += 1
                continue
            if tok.is_punct("..."):
                self.i += 1
                self.expression(frozenset({","}))
                continue
            if tok.is_punct("@"):
                raise self.fail("Decorators are not supported")
            while self.tok.is_ident("async", "get", "set") and self.member_key_start(self.i + 1):
                self.i += 1
            if self.tok.is_punct("*"):
                self.i += 1
            if self.tok.is_punct("["):
                self.brackets()
            elif self.tok.kind in (IDENT, STRING, NUMBER):
                self.i += 1
            else:
                raise self.fail("Property assignment expected")
            if self.tok.is_punct("?") and self.peek().is_punct("(", "<"):
                self.delete(self.i, self.i + 1)
                self.i += 1
            if self.tok.is_punct("(", "<"):
                self.signature()
                if not self.tok.is_punct("{"):
                    raise self.fail("'{' expected")
                self.block()
            elif self.tok.is_punct(":", "="):
                self.i += 1
                self.expression(frozenset({","}))
            if not self.tok.is_punct(",") and self.i != close:
                raise self.fail("',' expected")
        self.i = close + 1


def _starts_statement(token: Token) -> bool:
    """Whether ``token`` after a line break begins a new statement."""

    if token.kind == IDENT:
        return token.value not in _CONTINUING_WORDS
    if token.kind in (NUMBER, STRING, PRIVATE):
        return True
    return token.is_punct("{", "!", "~", "++", "--", "@")


def _last_char(pieces: List[str]) -> str:
    for piece in reversed(pieces):
        if piece:
            return piece[-1]
    return ""


def transpile(source: str) -> str:
    """Erase TypeScript-only syntax from ``source`` and lower enums.

    Raises :class:`~exercheck.errors.CompileError` for unsupported or
    malformed input. Plain JavaScript without module syntax is returned
    unchanged.
    """

    if not source or not source.strip():
        return source or ""
    return _Transpiler(source).run()
