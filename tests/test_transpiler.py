from __future__ import annotations

import textwrap

import pytest

from exercheck.errors import CompileError
from exercheck.transpile import transpile


def _ts(source: str) -> str:
    return textwrap.dedent(source).strip("\n")


def test_plain_javascript_is_unchanged() -> None:
    source = "function add(a, b) {\n  return a + b;\n}\n"
    assert transpile(source) == source


def test_blank_source_is_returned_as_is() -> None:
    assert transpile("") == ""
    assert transpile("  \n") == "  \n"


def test_parameter_and_return_annotations_are_erased() -> None:
    source = "function add(a: number, b: number): number {\n  return a + b;\n}"
    assert transpile(source) == "function add(a, b) {\n  return a + b;\n}"


def test_optional_parameters_and_defaults() -> None:
    source = 'function greet(name?: string, greeting: string = "Hi") {}'
    assert transpile(source) == 'function greet(name, greeting = "Hi") {}'


def test_interface_is_removed_but_lines_are_kept() -> None:
    source = _ts(
        """
        interface Point {
          x: number;
          y: number;
        }
        function getX(p: Point) { return p.x; }
        """
    )
    output = transpile(source)
    assert output == "\n\n\n\nfunction getX(p) { return p.x; }"
    assert output.count("\n") == source.count("\n")


def test_type_alias_and_variable_annotation() -> None:
    source = "type Id = string | number;\nconst id: Id = 1;"
    assert transpile(source) == "\nconst id = 1;"


def test_removed_statement_before_parenthesis_keeps_separator() -> None:
    source = "interface A {}\n(function () {})();"
    assert transpile(source) == ";\n(function () {})();"


def test_generic_arrow_function() -> None:
    source = "const first = <T>(items: T[]): T | undefined => items[0];"
    assert transpile(source) == "const first = (items) => items[0];"


def test_arrow_inside_call_arguments() -> None:
    assert transpile("xs.map((x: number): number => x * 2);") == "xs.map((x) => x * 2);"


def test_as_and_satisfies_and_non_null() -> None:
    assert transpile("const n = (value as number) + 1;") == "const n = (value) + 1;"
    assert transpile("const cfg = { a: 1 } satisfies Config;") == "const cfg = { a: 1 };"
    assert transpile("const len = name!.length;") == "const len = name.length;"


def test_explicit_type_arguments_on_calls() -> None:
    assert transpile("const xs = new Array<number>();") == "const xs = new Array();"
    assert transpile("const total = xs.reduce<number>((a, b) => a + b, 0);") == (
        "const total = xs.reduce((a, b) => a + b, 0);"
    )


def test_comparison_operators_survive() -> None:
    source = "function clamp(x: number) { return x < 0 ? 0 : x > 10 ? 10 : x; }"
    assert transpile(source) == "function clamp(x) { return x < 0 ? 0 : x > 10 ? 10 : x; }"


def test_catch_clause_annotation() -> None:
    source = "try { f(); } catch (e: unknown) { g(); }"
    assert transpile(source) == "try { f(); } catch (e) { g(); }"


def test_overload_signatures_are_dropped() -> None:
    source = "function f(a: string): string;\nfunction f(a: any) { return a; }"
    assert transpile(source) == "\nfunction f(a) { return a; }"


def test_declare_statement_is_dropped() -> None:
    assert transpile("declare const VERSION: string;\nconst v = 1;") == "\nconst v = 1;"


def test_import_type_is_dropped() -> None:
    assert transpile('import type { Foo } from "./foo";\nconst x = 1;') == "\nconst x = 1;"


def test_export_keyword_is_stripped() -> None:
    assert transpile("export function add(a: number) { return a; }") == "function add(a) { return a; }"


def test_class_members_and_parameter_properties() -> None:
    source = _ts(
        """
        class Counter implements Countable {
          private count: number = 0;
          constructor(private readonly step: number) {}
          increment(): number {
            this.count += this.step;
            return this.count;
          }
        }
        """
    )
    output = transpile(source)
    assert output.startswith("class Counter {\n")
    assert "  count = 0;" in output
    assert "constructor(step) { this.step = step;}" in output
    assert "increment() {" in output
    assert "private" not in output
    assert "readonly" not in output
    assert output.count("\n") == source.count("\n")


def test_parameter_properties_follow_super_call() -> None:
    source = "class B extends A { constructor(public x: number) { super(); } }"
    assert transpile(source) == "class B extends A { constructor(x) { super(); this.x = x; } }"


def test_abstract_class_and_members() -> None:
    source = _ts(
        """
        abstract class Shape {
          abstract area(): number;
          describe(): string { return 'shape'; }
        }
        """
    )
    assert transpile(source) == "class Shape {\n  \n  describe() { return 'shape'; }\n}"


def test_enum_is_lowered_to_object() -> None:
    output = transpile("enum Color { Red, Green }")
    assert output == (
        'var Color; (function (Color) { Color[Color["Red"] = 0] = "Red"; '
        'Color[Color["Green"] = 1] = "Green"; })(Color || (Color = {}));'
    )


def test_enum_initializers_and_string_members() -> None:
    source = _ts(
        """
        enum Level {
          Low = 1,
          High,
          Label = "label",
        }
        """
    )
    output = transpile(source)
    assert 'Level[Level["Low"] = 1] = "Low";' in output
    assert 'Level[Level["High"] = 2] = "High";' in output
    assert 'Level["Label"] = "label";' in output
    assert output.count("\n") == source.count("\n")


def test_enum_member_after_string_needs_initializer() -> None:
    with pytest.raises(CompileError) as exc:
        transpile('enum E { A = "a", B }')
    assert "Enum member must have initializer" in str(exc.value)


def test_template_substitutions_are_walked() -> None:
    source = "const s = `${(x as number) + 1} items`;"
    assert transpile(source) == "const s = `${(x) + 1} items`;"


@pytest.mark.parametrize(
    "source, message",
    [
        ("namespace Foo { }", "Namespaces and modules are not supported"),
        ("import { x } from './x';", "Import statements are not supported"),
        ("export * from './x';", "Re-exports are not supported"),
        ("@sealed class A {}", "Decorators are not supported"),
        ("let x: = 1;", "Type expected"),
    ],
)
def test_unsupported_or_malformed_syntax(source: str, message: str) -> None:
    with pytest.raises(CompileError) as exc:
        transpile(source)
    assert message in str(exc.value)
    assert str(exc.value).startswith("TypeScript compilation error:")


def test_compile_error_reports_location() -> None:
    with pytest.raises(CompileError) as exc:
        transpile("const a = 1;\nlet x: = 1;")
    assert (exc.value.line, exc.value.column) == (2, 8)
