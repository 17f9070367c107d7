# src/wcforge/rewrite.py
"""Turn ES-module linkage into reads and writes on a global namespace object.

A component's module build keeps its `import`/`export` statements. The
script build cannot, so every named import becomes

    const <local> = <namespace>.<imported>;

and every named export becomes

    <namespace>.<exported> = <local>;

Everything else in the file is kept byte-for-byte: statements are sliced out
of the source using the parser's ranges, and only the replacement statements
are generated as text.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from typing import Any

import esprima

from .constants import DEFAULT_GLOBAL_NAMESPACE
from .errors import ProcessingError
from .logs import get_app_logger


# --- types ------------------------------------------------------------------


@dataclass(frozen=True)
class Statement:
    """One top-level statement.

    `leading` is the whitespace and comments between the previous statement
    and this one, so a program renders back to its exact source.
    """

    type: str
    code: str
    leading: str = ""
    node: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Program:
    body: tuple[Statement, ...]
    trailing: str = ""
    source_type: str = "module"


@dataclass(frozen=True)
class RewriteOptions:
    namespace: str = DEFAULT_GLOBAL_NAMESPACE
    # leave imports in place for a downstream bundler
    bundle_imports: bool = False
    # imported names must start with this (case-insensitive) when set
    import_prefix: str | None = None


@dataclass(frozen=True)
class _RewriteState:
    body: tuple[Statement, ...]
    offset: int = 0
    exported: frozenset[str] = frozenset()

    def splice(
        self,
        index: int,
        replacement: tuple[Statement, ...],
        exported: frozenset[str] | None = None,
    ) -> _RewriteState:
        """Replace the statement originally at `index` with `replacement`."""
        at = index + self.offset
        leading = self.body[at].leading
        if replacement:
            replacement = (replace(replacement[0], leading=leading), *replacement[1:])
        return _RewriteState(
            body=(*self.body[:at], *replacement, *self.body[at + 1 :]),
            offset=self.offset + len(replacement) - 1,
            exported=self.exported if exported is None else exported,
        )


# --- parsing / rendering ------------------------------------------------------


def parse_program(source: str) -> Program:
    """Parse an ES module. Syntax errors from the parser propagate as-is."""
    tree = esprima.parseModule(source, {"range": True})
    body: list[Statement] = []
    cursor = 0
    for node in tree.body:
        start, end = node.range
        body.append(
            Statement(
                type=node.type,
                code=source[start:end],
                leading=source[cursor:start],
                node=node,
            )
        )
        cursor = end
    return Program(
        body=tuple(body),
        trailing=source[cursor:],
        source_type=getattr(tree, "sourceType", None) or "module",
    )


def render_program(program: Program) -> str:
    return "".join(s.leading + s.code for s in program.body) + program.trailing


def render_script(program: Program, namespace: str) -> str:
    """Render as a plain script that first makes sure the namespace exists."""
    return f"{namespace} = {namespace} || {{}};\n{render_program(program)}"


def count_default_exports(program: Program) -> int:
    return sum(1 for s in program.body if s.type == "ExportDefaultDeclaration")


# --- helpers ------------------------------------------------------------------


def _synthetic(kind: str, code: str) -> Statement:
    return Statement(type=kind, code=code, leading="\n")


def _node_name(node: Any) -> str:
    return getattr(node, "name", None) or "?"


def _source_slice(program_stmt: Statement, node: Any) -> str:
    """Text of a nested node, cut out of its enclosing statement."""
    outer_start = program_stmt.node.range[0]
    start, end = node.range
    return program_stmt.code[start - outer_start : end - outer_start]


def _binding_names(declaration: Any) -> Iterator[str]:
    """Yield the names bound by an exported declaration."""
    if declaration.type == "VariableDeclaration":
        targets = [d.id for d in declaration.declarations]
    else:
        targets = [getattr(declaration, "id", None)]

    for target in targets:
        if target is None:
            xmsg = "Cannot automatically process declaration (no id present)."
            raise ProcessingError(xmsg)
        if target.type != "Identifier":
            xmsg = f"Cannot automatically process declaration of type {target.type}."
            raise ProcessingError(xmsg)
        yield target.name


# --- imports ------------------------------------------------------------------


def ensure_processable_import(node: Any, options: RewriteOptions) -> None:
    """Raise ProcessingError unless every specifier is a usable named import."""
    for specifier in node.specifiers:
        local = _node_name(specifier.local)
        if specifier.type == "ImportDefaultSpecifier":
            xmsg = f'Cannot automatically process default imports - "{local}".'
            raise ProcessingError(xmsg)
        if specifier.type == "ImportNamespaceSpecifier":
            xmsg = f'Cannot automatically process namespace imports - "{local}".'
            raise ProcessingError(xmsg)

        imported = _node_name(specifier.imported)
        prefix = options.import_prefix
        if prefix and not imported.lower().startswith(prefix.lower()):
            xmsg = (
                f'Cannot automatically process import "{imported}":'
                f' imported names must start with "{prefix}".'
            )
            raise ProcessingError(xmsg)


def import_replacements(
    node: Any, options: RewriteOptions
) -> tuple[Statement, ...]:
    ensure_processable_import(node, options)
    return tuple(
        _synthetic(
            "VariableDeclaration",
            f"const {_node_name(s.local)} = "
            f"{options.namespace}.{_node_name(s.imported)};",
        )
        for s in node.specifiers
    )


# --- exports ------------------------------------------------------------------


def _assignment(namespace: str, exported: str, local: str) -> Statement:
    return _synthetic("ExpressionStatement", f"{namespace}.{exported} = {local};")


def export_replacements(
    statement: Statement,
    exported: frozenset[str],
    options: RewriteOptions,
) -> tuple[tuple[Statement, ...], frozenset[str]]:
    """Replacement statements for one export, plus the updated exported names.

    A name that was already exported is skipped, so the first export of a
    name wins.
    """
    node = statement.node
    if statement.type == "ExportDefaultDeclaration":
        xmsg = "Cannot automatically process default exports."
        raise ProcessingError(xmsg)
    if statement.type == "ExportAllDeclaration":
        source = getattr(node.source, "value", "?")
        xmsg = f'Cannot automatically process `export *` from "{source}".'
        raise ProcessingError(xmsg)
    if getattr(node, "source", None) is not None:
        xmsg = f'Cannot automatically process re-exports from "{node.source.value}".'
        raise ProcessingError(xmsg)

    out: list[Statement] = []
    names = set(exported)

    declaration = getattr(node, "declaration", None)
    if declaration is not None:
        out.append(
            Statement(
                type=declaration.type,
                code=_source_slice(statement, declaration),
                node=declaration,
            )
        )
        pairs = [(name, name) for name in _binding_names(declaration)]
    else:
        pairs = [
            (_node_name(s.exported), _node_name(s.local))
            for s in node.specifiers or []
        ]

    for exported_name, local_name in pairs:
        if exported_name in names:
            continue
        names.add(exported_name)
        out.append(_assignment(options.namespace, exported_name, local_name))

    return tuple(out), frozenset(names)


# --- rewrite ------------------------------------------------------------------

_EXPORT_TYPES = frozenset(
    {"ExportNamedDeclaration", "ExportDefaultDeclaration", "ExportAllDeclaration"}
)


def rewrite_program(program: Program, options: RewriteOptions) -> Program:
    """Replace imports and exports with global namespace reads and writes.

    Statements are visited in body order; each replacement is spliced in at
    its original index shifted by the growth of everything spliced before it.
    Raises ProcessingError on the first unsupported form, and the input
    program is never modified.
    """
    logger = get_app_logger()
    state = _RewriteState(body=program.body)

    for index, statement in enumerate(program.body):
        if statement.type == "ImportDeclaration":
            if options.bundle_imports:
                continue
            state = state.splice(index, import_replacements(statement.node, options))
        elif statement.type in _EXPORT_TYPES:
            replacement, exported = export_replacements(
                statement, state.exported, options
            )
            state = state.splice(index, replacement, exported)

    logger.trace(
        "[rewrite] %d → %d statements, exported: %s",
        len(program.body),
        len(state.body),
        ", ".join(sorted(state.exported)) or "(none)",
    )
    return replace(program, body=state.body)


def rewrite_source(source: str, options: RewriteOptions) -> str:
    """Parse, rewrite and render module source as a global-scope script."""
    program = rewrite_program(parse_program(source), options)
    return render_script(program, options.namespace)
