"""Targeted edits on generated source files and manifests.

Each operation works on one file, is a no-op when the file does not exist,
is idempotent, and only writes the file back when its content changed.

Import, call and array-entry removals are structural: the file is parsed with
tree-sitter and the matching nodes are cut out by byte range.  Removing a
plugin or array entry falls back to a pattern edit when the file does not
parse; :func:`remove_imports_by_names` is purely textual.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from pathlib import Path

from tree_sitter import Node

from hs_cli.codemod.manifest import Manifest
from hs_cli.codemod.parsing import (
    Edit,
    ParseError,
    apply_edits,
    callee_name,
    element_range,
    first_argument,
    import_source,
    line_range,
    node_text,
    parse_source,
    parse_strict,
    read_source,
    string_value,
    walk,
)

_BLANK_LINES = re.compile(rb"\n[ \t]*\n(?:[ \t]*\n)+")
_ORPHAN_COMMAS = re.compile(rb",(\s*,)+")
_LEADING_COMMA = re.compile(rb"\[(\s*),")


# ---------------------------------------------------------------------------
# Imports
# ---------------------------------------------------------------------------


def remove_import(file: str | Path, module_specifier: str) -> bool:
    """Remove every import declaration of *module_specifier*.

    Matching is exact: removing ``"foo"`` leaves ``"foo-bar"`` and ``"./foo"``
    alone.  The line break after the declaration goes with it.

    Returns:
        ``True`` if the file was modified.

    Raises:
        ParseError: If the file cannot be parsed.
    """
    path = Path(file)
    if not path.is_file():
        return False
    source = read_source(path)
    tree = parse_strict(source, path)

    edits: list[Edit] = []
    for node in tree.root_node.children:
        if node.type == "import_statement" and import_source(node) == module_specifier:
            start, end = line_range(source, node.start_byte, node.end_byte)
            edits.append((start, end, b""))
    return _write_edits(path, source, edits)


def has_import(file: str | Path, module_specifier: str) -> bool:
    """Whether *file* imports exactly *module_specifier*.

    Raises:
        ParseError: If the file cannot be parsed.
    """
    path = Path(file)
    if not path.is_file():
        return False
    source = read_source(path)
    tree = parse_strict(source, path)
    return any(
        node.type == "import_statement" and import_source(node) == module_specifier
        for node in tree.root_node.children
    )


def remove_imports_by_names(file: str | Path, names: Iterable[str]) -> bool:
    """Textually remove imports that bind or load any of *names*.

    Three shapes are recognised for every name ``X``::

        import X from 'mod'
        import { a, X, b } from 'mod'      (X matched as a whole token)
        import 'X'

    The whole declaration is removed even when other names share the braces.
    """
    path = Path(file)
    if not path.is_file():
        return False
    source = path.read_bytes()
    content = source
    for name in names:
        token = re.escape(name.encode("utf-8"))
        patterns = (
            rb"import\s+" + token + rb"\s+from\s+['\"][^'\"]+['\"]\s*;?[ \t]*\r?\n?",
            rb"import\s*\{[^}]*(?<![\w$])" + token + rb"(?![\w$])[^}]*\}\s*from\s+['\"][^'\"]+['\"]\s*;?[ \t]*\r?\n?",
            rb"import\s+['\"]" + token + rb"['\"]\s*;?[ \t]*\r?\n?",
        )
        for pattern in patterns:
            content = re.sub(pattern, b"", content)
    if content != source:
        content = _BLANK_LINES.sub(b"\n\n", content)
    return _write_if_changed(path, source, content)


# ---------------------------------------------------------------------------
# Calls
# ---------------------------------------------------------------------------

_STATEMENT_BOUNDARIES = {"program", "statement_block", "class_body", "switch_body"}
_DECLARATIONS = {"lexical_declaration", "variable_declaration"}


def _enclosing_statement(node: Node) -> Node | None:
    """Nearest ancestor that is a statement or variable declaration."""
    current = node.parent
    while current is not None and current.type not in _STATEMENT_BOUNDARIES:
        if current.type.endswith("_statement") or current.type in _DECLARATIONS:
            return current
        current = current.parent
    return None


def remove_function_call(
    file: str | Path,
    function_name: str,
    argument_match: str | None = None,
) -> bool:
    """Remove statements calling *function_name*.

    *function_name* is either a bare identifier (``createApp``) or a dotted
    member call (``app.use``).  With *argument_match*, only calls whose first
    argument's source text contains it are removed.

    The whole enclosing statement is removed.  A matching call buried inside a
    larger expression (``app.use(router).mount('#app')``) therefore takes the
    entire statement with it.

    Raises:
        ParseError: If the file cannot be parsed.
    """
    path = Path(file)
    if not path.is_file():
        return False
    source = read_source(path)
    tree = parse_strict(source, path)

    statements: dict[tuple[int, int], Node] = {}
    for node in walk(tree.root_node):
        if node.type != "call_expression" or callee_name(node) != function_name:
            continue
        if argument_match is not None:
            argument = first_argument(node)
            if argument is None or argument_match not in node_text(argument):
                continue
        statement = _enclosing_statement(node)
        if statement is not None:
            statements[(statement.start_byte, statement.end_byte)] = statement

    edits = [line_range(source, start, end) + (b"",) for start, end in _outermost(statements)]
    return _write_edits(path, source, edits)


def _outermost(ranges: Iterable[tuple[int, int]]) -> list[tuple[int, int]]:
    kept: list[tuple[int, int]] = []
    for start, end in sorted(ranges, key=lambda r: (r[0], -r[1])):
        if kept and start >= kept[-1][0] and end <= kept[-1][1]:
            continue
        kept.append((start, end))
    return kept


# ---------------------------------------------------------------------------
# Array entries (plugins, modules)
# ---------------------------------------------------------------------------


def remove_vite_plugin(file: str | Path, plugin_name: str) -> bool:
    """Remove ``plugin_name(...)`` entries from array literals.

    Typically used on the ``plugins`` array of a Vite or Nuxt config.  When
    the file parses, entries are removed structurally, whatever their
    argument nesting.  Otherwise a pattern edit removes ``plugin_name(...)``
    with parentheses nested at most one level deep, and orphaned commas are
    cleaned up afterwards.
    """

    def matches(node: Node) -> bool:
        if node.type != "call_expression":
            return False
        function = node.child_by_field_name("function")
        return function is not None and function.type == "identifier" and node_text(function) == plugin_name

    name = re.escape(plugin_name.encode("utf-8"))
    fallback = (
        rb"[ \t]*(?<![\w$.])" + name + rb"\s*\((?:[^()]|\([^()]*\))*\)[ \t]*,?[ \t]*(?:\r?\n)?"
    )
    return _remove_array_elements(Path(file), matches, fallback)


def remove_array_entry(file: str | Path, value: str) -> bool:
    """Remove string entries equal to *value* from array literals.

    Used for Nuxt ``modules: ['@unocss/nuxt', ...]`` lists.
    """

    def matches(node: Node) -> bool:
        return string_value(node) == value

    literal = re.escape(value.encode("utf-8"))
    fallback = rb"""[ \t]*['"]""" + literal + rb"""['"][ \t]*,?[ \t]*(?:\r?\n)?"""
    return _remove_array_elements(Path(file), matches, fallback)


def _remove_array_elements(path: Path, matches: Callable[[Node], bool], fallback: bytes) -> bool:
    if not path.is_file():
        return False
    source = read_source(path)
    tree = parse_source(source, path)

    if tree.root_node.has_error:
        content = re.sub(fallback, b"", source)
        if content != source:
            content = _ORPHAN_COMMAS.sub(b",", content)
            content = _LEADING_COMMA.sub(rb"[\1", content)
            content = _BLANK_LINES.sub(b"\n\n", content)
        return _write_if_changed(path, source, content)

    edits: list[Edit] = []
    for node in walk(tree.root_node):
        if node.parent is not None and node.parent.type == "array" and matches(node):
            edits.append(element_range(source, node) + (b"",))
    if not edits:
        return False
    content = _BLANK_LINES.sub(b"\n\n", apply_edits(source, edits))
    return _write_if_changed(path, source, content)


# ---------------------------------------------------------------------------
# Manifest
# ---------------------------------------------------------------------------


def remove_dependencies(
    manifest_file: str | Path,
    names: Iterable[str],
    section: str = "dependencies",
) -> bool:
    """Delete *names* from a manifest section and rewrite the manifest.

    Missing manifests, sections and keys are ignored.

    Raises:
        ManifestReadError: If the manifest exists but is not valid JSON.
    """
    manifest = Manifest.load_optional(manifest_file)
    if manifest is None:
        return False
    manifest.remove_dependencies(names, section)
    return manifest.save()


def remove_scripts(manifest_file: str | Path, names: Iterable[str]) -> bool:
    """Delete *names* from the manifest's ``scripts`` and rewrite it."""
    manifest = Manifest.load_optional(manifest_file)
    if manifest is None:
        return False
    manifest.remove_scripts(names)
    return manifest.save()


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _write_edits(path: Path, source: bytes, edits: list[Edit]) -> bool:
    if not edits:
        return False
    return _write_if_changed(path, source, apply_edits(source, edits))


def _write_if_changed(path: Path, before: bytes, after: bytes) -> bool:
    if after == before:
        return False
    path.write_bytes(after)
    return True


__all__ = [
    "ParseError",
    "has_import",
    "remove_array_entry",
    "remove_dependencies",
    "remove_function_call",
    "remove_import",
    "remove_imports_by_names",
    "remove_scripts",
    "remove_vite_plugin",
]
