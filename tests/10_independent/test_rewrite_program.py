# tests/10_independent/test_rewrite_program.py
"""Tests for wcforge.rewrite: imports and exports to global namespace access."""

import pytest
from esprima.error_handler import Error as EsprimaError

import wcforge.errors as mod_errors
import wcforge.rewrite as mod_rewrite


NS = "window.WC"
OPTIONS = mod_rewrite.RewriteOptions(namespace=NS)


def _rewrite(source: str, options: mod_rewrite.RewriteOptions = OPTIONS) -> str:
    program = mod_rewrite.parse_program(source)
    return mod_rewrite.render_program(mod_rewrite.rewrite_program(program, options))


def _codes(source: str) -> list[str]:
    program = mod_rewrite.rewrite_program(mod_rewrite.parse_program(source), OPTIONS)
    return [s.code for s in program.body]


# --- imports --------------------------------------------------------------------


def test_named_import_becomes_local_binding_from_namespace() -> None:
    # --- execute ---
    out = _rewrite("import { Foo as Bar } from 'x';\nBar();\n")

    # --- verify ---
    assert "const Bar = window.WC.Foo;" in out
    assert "import" not in out
    assert out.endswith("Bar();\n")


def test_each_import_specifier_gets_its_own_binding() -> None:
    codes = _codes("import { A, B as C } from './a.mjs';")
    assert codes == ["const A = window.WC.A;", "const C = window.WC.B;"]


def test_side_effect_import_is_removed() -> None:
    assert _codes("import './polyfill.mjs';\nrun();") == ["run();"]


def test_default_import_is_rejected_naming_the_binding() -> None:
    with pytest.raises(mod_errors.ProcessingError, match='"Default"'):
        _rewrite("import Default from 'x';")


def test_namespace_import_is_rejected() -> None:
    with pytest.raises(mod_errors.ProcessingError, match="namespace imports"):
        _rewrite("import * as everything from 'x';")


def test_import_prefix_is_case_insensitive() -> None:
    options = mod_rewrite.RewriteOptions(namespace=NS, import_prefix="wc")
    out = _rewrite("import { WcButton } from './b.mjs';", options)
    assert "const WcButton = window.WC.WcButton;" in out


def test_import_prefix_violation_names_the_import() -> None:
    options = mod_rewrite.RewriteOptions(namespace=NS, import_prefix="Wc")
    with pytest.raises(mod_errors.ProcessingError, match='"Button"'):
        _rewrite("import { Button } from './b.mjs';", options)


def test_bundle_imports_leaves_imports_untouched() -> None:
    # --- setup ---
    source = "import { A } from './a.mjs';\nexport { A as B };\n"
    options = mod_rewrite.RewriteOptions(namespace=NS, bundle_imports=True)

    # --- execute ---
    out = _rewrite(source, options)

    # --- verify ---
    assert out.startswith("import { A } from './a.mjs';")
    assert "window.WC.B = A;" in out


# --- exports --------------------------------------------------------------------


def test_specifier_export_becomes_assignment() -> None:
    codes = _codes("const a = 1;\nexport { a as x, a };")
    assert codes == ["const a = 1;", "window.WC.x = a;", "window.WC.a = a;"]


def test_duplicate_export_name_is_assigned_once() -> None:
    # --- execute ---
    out = _rewrite("const a = 1, b = 2;\nexport { a as x };\nexport { b as x };\n")

    # --- verify: exactly one assignment, whichever wins ---
    assert out.count("window.WC.x =") == 1


def test_function_declaration_export_keeps_declaration() -> None:
    # --- execute ---
    out = _rewrite("export function foo() {}\n")

    # --- verify ---
    assert "function foo() {}" in out
    assert "export" not in out
    assert out.count("window.WC.foo = foo;") == 1


def test_variable_declaration_export_assigns_every_binding() -> None:
    codes = _codes("export const a = 1, b = 2;")
    assert codes == ["const a = 1, b = 2;", "window.WC.a = a;", "window.WC.b = b;"]


def test_class_declaration_export() -> None:
    codes = _codes("export class El extends HTMLElement {}")
    assert codes == ["class El extends HTMLElement {}", "window.WC.El = El;"]


def test_destructuring_export_is_rejected() -> None:
    with pytest.raises(mod_errors.ProcessingError, match="ObjectPattern"):
        _rewrite("export const { a } = obj;")


def test_default_export_is_rejected() -> None:
    with pytest.raises(mod_errors.ProcessingError, match="default exports"):
        _rewrite("export default class {}")


def test_export_all_is_rejected() -> None:
    with pytest.raises(mod_errors.ProcessingError, match="export \\*"):
        _rewrite("export * from './a.mjs';")


def test_re_export_is_rejected() -> None:
    with pytest.raises(mod_errors.ProcessingError, match="re-exports"):
        _rewrite("export { a } from './a.mjs';")


# --- splicing -------------------------------------------------------------------


def test_offset_keeps_unrelated_statement_between_replacements() -> None:
    # --- setup ---
    source = "import { A, B } from 'x';\nconst y = 1;\nexport { y };\n"

    # --- execute ---
    codes = _codes(source)

    # --- verify ---
    assert codes == [
        "const A = window.WC.A;",
        "const B = window.WC.B;",
        "const y = 1;",
        "window.WC.y = y;",
    ]


def test_growth_accumulates_across_several_replacements() -> None:
    source = (
        "import { A, B, C } from 'x';\n"
        "one();\n"
        "export const p = 1, q = 2;\n"
        "two();\n"
        "export { A };\n"
        "three();\n"
    )
    assert _codes(source) == [
        "const A = window.WC.A;",
        "const B = window.WC.B;",
        "const C = window.WC.C;",
        "one();",
        "const p = 1, q = 2;",
        "window.WC.p = p;",
        "window.WC.q = q;",
        "two();",
        "window.WC.A = A;",
        "three();",
    ]


def test_rewrite_does_not_mutate_input_program() -> None:
    # --- setup ---
    program = mod_rewrite.parse_program("import { A } from 'x';\nexport { A };")
    before = program.body

    # --- execute ---
    mod_rewrite.rewrite_program(program, OPTIONS)

    # --- verify ---
    assert program.body == before
    assert [s.type for s in program.body] == [
        "ImportDeclaration",
        "ExportNamedDeclaration",
    ]


def test_untouched_source_renders_byte_identical() -> None:
    source = "// header\n\nconst a = 1;   /* keep */\n\nfunction f() {\n  return a;\n}\n"
    assert _rewrite(source) == source


def test_parse_errors_propagate() -> None:
    with pytest.raises(EsprimaError):
        mod_rewrite.parse_program("export const = ;")


# --- script rendering -----------------------------------------------------------


def test_rewrite_source_prepends_namespace_initialiser() -> None:
    out = mod_rewrite.rewrite_source("export const a = 1;\n", OPTIONS)
    assert out.startswith("window.WC = window.WC || {};\n")
    assert out.count("window.WC = window.WC || {};") == 1


def test_count_default_exports() -> None:
    program = mod_rewrite.parse_program(
        "export default function () {}\nexport const a = 1;"
    )
    assert mod_rewrite.count_default_exports(program) == 1
