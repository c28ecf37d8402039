"""Strip TypeScript down to JavaScript.

The conversion is purely syntactic: type-level syntax is cut out of the
source by byte range, so formatting and comments survive untouched and type
errors are irrelevant.  Constructs that carry runtime meaning (enums and
constructor parameter properties) are rewritten to the JavaScript that
``tsc`` would emit for them, and import bindings that are only ever used as
types are elided the way ``tsc`` elides them.

Only structurally malformed input fails, with :class:`ConversionError`.

Known limitations: non-ambient ``namespace`` blocks and ``import x =
require()`` aliases are left as they are, and enum members that reference
sibling members by bare name are not qualified.
"""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from tree_sitter import Node

from hs_cli.codemod.parsing import (
    Edit,
    ParseError,
    apply_edits,
    element_range,
    first_error_location,
    indentation_at,
    line_range,
    node_text,
    parse_source,
    read_source,
    walk,
)

console = Console()

# Removed outright, no surrounding whitespace handling.
_ERASED_NODES = {
    "type_annotation",
    "type_predicate_annotation",
    "asserts_annotation",
    "opting_type_annotation",
    "omitting_type_annotation",
    "adding_type_annotation",
    "type_arguments",
    "type_parameters",
}

# Removed together with the line(s) they occupy.
_ERASED_STATEMENTS = {
    "interface_declaration",
    "type_alias_declaration",
    "ambient_declaration",
    "function_signature",
    "index_signature",
    "method_signature",
    "abstract_method_signature",
}

_MODIFIER_NODES = {"accessibility_modifier", "override_modifier"}

# Anonymous tokens to drop, per parent node type.
_MARKER_TOKENS = {
    "required_parameter": {"readonly"},
    "optional_parameter": {"readonly", "?"},
    "public_field_definition": {"readonly", "?", "!"},
    "method_definition": {"?"},
    "variable_declarator": {"!"},
    "non_null_expression": {"!"},
    "abstract_class_declaration": {"abstract"},
}

_VALUE_IDENTIFIERS = {"identifier", "shorthand_property_identifier"}

_OUTPUT_SUFFIXES = {".ts": ".js", ".mts": ".mjs", ".cts": ".cjs"}


class ConversionError(Exception):
    """Raised when a TypeScript source is too malformed to convert."""

    def __init__(self, message: str, path: str | Path | None = None):
        self.path = Path(path) if path is not None else None
        super().__init__(message)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def to_untyped(source_text: str, path: str | Path | None = None) -> str:
    """Convert TypeScript *source_text* to JavaScript.

    Args:
        source_text: The TypeScript module source.
        path: Optional file path, used for grammar selection and messages.

    Returns:
        The JavaScript source.

    Raises:
        ConversionError: If the source has syntax errors.
    """
    source = source_text.encode("utf-8")
    tree = parse_source(source, path)
    if tree.root_node.has_error:
        where = path or "<source>"
        line = first_error_location(tree.root_node)
        raise ConversionError(f"Cannot convert {where}: syntax error near line {line}", path)
    return _TypeStripper(source).run(tree.root_node).decode("utf-8")


def output_path_for(path: str | Path) -> Path:
    """Sibling JavaScript path for a TypeScript file (``a.ts`` -> ``a.js``)."""
    file_path = Path(path)
    return file_path.with_suffix(_OUTPUT_SUFFIXES.get(file_path.suffix, ".js"))


def convert_file(path: str | Path) -> Path:
    """Convert one ``.ts`` file in place: write the ``.js`` sibling, drop the original.

    Raises:
        ConversionError: If the file cannot be read or converted.  The
            original file is left untouched in that case.
    """
    file_path = Path(path)
    try:
        source_text = read_source(file_path).decode("utf-8")
    except ParseError as exc:
        raise ConversionError(str(exc), file_path) from exc
    output = to_untyped(source_text, file_path)
    target = output_path_for(file_path)
    target.write_text(output, encoding="utf-8")
    file_path.unlink()
    return target


def is_convertible(path: Path) -> bool:
    return path.suffix == ".ts" and not path.name.endswith(".d.ts")


def convert_tree(directory: str | Path) -> tuple[list[Path], list[tuple[Path, str]]]:
    """Convert every ``*.ts`` file under *directory*, skipping ``*.d.ts``.

    A file that fails to convert is reported and left in place; the other
    files are still converted.

    Returns:
        A ``(converted, failures)`` tuple where *failures* holds
        ``(path, message)`` pairs.
    """
    root = Path(directory)
    converted: list[Path] = []
    failures: list[tuple[Path, str]] = []
    if not root.is_dir():
        return converted, failures

    for file_path in sorted(p for p in root.rglob("*.ts") if p.is_file() and is_convertible(p)):
        try:
            converted.append(convert_file(file_path))
        except ConversionError as exc:
            console.print(f"  [yellow]Skipping {file_path.name}: {exc}[/yellow]")
            failures.append((file_path, str(exc)))
    return converted, failures


# ---------------------------------------------------------------------------
# Stripper
# ---------------------------------------------------------------------------


class _TypeStripper:
    """Collects byte-range edits that turn a TypeScript tree into JavaScript."""

    def __init__(self, source: bytes) -> None:
        self.source = source
        self.edits: list[Edit] = []
        self.used: set[str] = set()
        self.imports: list[Node] = []

    def run(self, root: Node) -> bytes:
        self.visit(root)
        self.elide_imports()
        return apply_edits(self.source, self.edits)

    # -- Edit primitives ---------------------------------------------------

    def erase(self, start: int, end: int) -> None:
        self.edits.append((start, end, b""))

    def erase_statement(self, node: Node) -> None:
        """Remove the lines *node* owns.

        When a blank line (or the start of the file) precedes the statement,
        the blank lines following it go too, so no run of blank lines is left
        behind.
        """
        start, end = line_range(self.source, node.start_byte, node.end_byte)
        if start == 0 or _follows_blank_line(self.source, start):
            end = _skip_blank_lines(self.source, end)
        self.edits.append((start, end, b""))

    def erase_token(self, node: Node) -> None:
        end = node.end_byte
        while end < len(self.source) and self.source[end:end + 1] in (b" ", b"\t"):
            end += 1
        self.erase(node.start_byte, end)

    def erase_element(self, node: Node) -> None:
        self.edits.append(element_range(self.source, node) + (b"",))

    # -- Traversal ---------------------------------------------------------

    def visit(self, node: Node) -> None:
        kind = node.type

        if kind in _ERASED_NODES:
            self.erase(node.start_byte, node.end_byte)
            return
        if kind == "implements_clause":
            start = node.start_byte
            while start > 0 and self.source[start - 1:start] in (b" ", b"\t"):
                start -= 1
            self.erase(start, node.end_byte)
            return
        if kind in _ERASED_STATEMENTS or _is_ambient_member(node):
            self.erase_statement(node)
            return
        if kind == "import_statement":
            self.imports.append(node)
            return
        if kind == "export_statement" and _is_type_only_export(node):
            self.erase_statement(node)
            return
        if kind in ("export_specifier", "import_specifier") and _has_token(node, "type"):
            self.erase_element(node)
            return
        if kind == "required_parameter" and _is_this_parameter(node):
            self.erase_element(node)
            return
        if kind == "enum_declaration":
            self.rewrite_enum(node)
            return
        if kind in ("as_expression", "satisfies_expression"):
            expression = node.children[0]
            self.erase(expression.end_byte, node.end_byte)
            self.visit(expression)
            return
        if kind in _VALUE_IDENTIFIERS:
            self.used.add(node_text(node))
            return
        if kind == "method_definition" and _is_constructor(node):
            self.rewrite_parameter_properties(node)

        markers = _MARKER_TOKENS.get(kind, ())
        for child in node.children:
            if child.type in _MODIFIER_NODES:
                self.erase_token(child)
            elif not child.is_named and child.type in markers:
                self.erase_token(child)
            else:
                self.visit(child)

    def collect_identifiers(self, node: Node) -> None:
        for child in walk(node):
            if child.type in _VALUE_IDENTIFIERS:
                self.used.add(node_text(child))

    # -- Imports -----------------------------------------------------------

    def elide_imports(self) -> None:
        """Drop import bindings that are never referenced as values."""
        for statement in self.imports:
            if _has_token(statement, "type") or _has_token(statement, "typeof"):
                self.erase_statement(statement)
                continue
            clause = next((c for c in statement.children if c.type == "import_clause"), None)
            if clause is None:
                continue

            kept: list[str] = []
            named: list[str] = []
            total = dropped = 0
            for part in clause.named_children:
                if part.type == "identifier":
                    total += 1
                    if node_text(part) in self.used:
                        kept.append(node_text(part))
                    else:
                        dropped += 1
                elif part.type == "namespace_import":
                    total += 1
                    local = next((c for c in part.named_children if c.type == "identifier"), None)
                    if local is None or node_text(local) in self.used:
                        kept.append(node_text(part))
                    else:
                        dropped += 1
                elif part.type == "named_imports":
                    for spec in part.named_children:
                        if spec.type != "import_specifier":
                            continue
                        total += 1
                        local = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
                        if _has_token(spec, "type"):
                            dropped += 1
                        elif local is None or local.type != "identifier" or node_text(local) in self.used:
                            named.append(node_text(spec))
                        else:
                            dropped += 1

            if dropped == 0:
                continue
            if dropped == total:
                self.erase_statement(statement)
                continue
            if named:
                kept.append("{ " + ", ".join(named) + " }")
            self.edits.append((clause.start_byte, clause.end_byte, ", ".join(kept).encode("utf-8")))

    # -- Runtime rewrites --------------------------------------------------

    def rewrite_enum(self, node: Node) -> None:
        """Replace an enum with the IIFE form ``tsc`` emits."""
        name = node_text(node.child_by_field_name("name"))
        body = node.child_by_field_name("body")
        indent = indentation_at(self.source, node.start_byte)
        inner = indent + "    "

        lines = [f"var {name};", f"{indent}(function ({name}) {{"]
        auto: int | float | None = 0
        previous_key: str | None = None
        for member in body.named_children if body is not None else ():
            if member.type == "comment":
                continue
            if member.type == "enum_assignment":
                key_node = member.child_by_field_name("name") or member.named_children[0]
                value_node = member.child_by_field_name("value") or member.named_children[-1]
            else:
                key_node, value_node = member, None
            key = json.dumps(_member_key(key_node))

            if value_node is None:
                if auto is not None:
                    value = _format_number(auto)
                    auto += 1
                else:
                    value = f"{name}[{json.dumps(previous_key)}] + 1"
                lines.append(f"{inner}{name}[{name}[{key}] = {value}] = {key};")
            elif value_node.type in ("string", "template_string"):
                lines.append(f"{inner}{name}[{key}] = {node_text(value_node)};")
                auto = None
            else:
                self.collect_identifiers(value_node)
                literal = _numeric_value(value_node)
                auto = literal + 1 if literal is not None else None
                lines.append(f"{inner}{name}[{name}[{key}] = {node_text(value_node)}] = {key};")
            previous_key = _member_key(key_node)

        lines.append(f"{indent}}})({name} || ({name} = {{}}));")
        self.edits.append((node.start_byte, node.end_byte, "\n".join(lines).encode("utf-8")))

    def rewrite_parameter_properties(self, constructor: Node) -> None:
        """Turn ``constructor(private x: T)`` into an explicit ``this.x = x;``."""
        parameters = constructor.child_by_field_name("parameters")
        body = constructor.child_by_field_name("body")
        if parameters is None or body is None:
            return

        names = []
        for parameter in parameters.named_children:
            if parameter.type not in ("required_parameter", "optional_parameter"):
                continue
            if not any(
                c.type in _MODIFIER_NODES or (not c.is_named and c.type == "readonly")
                for c in parameter.children
            ):
                continue
            pattern = parameter.child_by_field_name("pattern")
            if pattern is not None and pattern.type == "identifier":
                names.append(node_text(pattern))
        if not names:
            return

        statements = [c for c in body.named_children if c.type != "comment"]
        if statements:
            indent = indentation_at(self.source, statements[0].start_byte)
        else:
            indent = indentation_at(self.source, constructor.start_byte) + "    "
        anchor = body.start_byte + 1
        if statements and _is_super_call(statements[0]):
            anchor = statements[0].end_byte

        assignments = "".join(f"\n{indent}this.{n} = {n};" for n in names)
        end = anchor
        if not statements and b"\n" not in self.source[body.start_byte:body.end_byte]:
            # Single-line body: the closing brace moves to its own line.
            assignments += "\n" + indentation_at(self.source, constructor.start_byte)
            if not self.source[anchor:body.end_byte - 1].strip():
                end = body.end_byte - 1
        self.edits.append((anchor, end, assignments.encode("utf-8")))


def _follows_blank_line(source: bytes, start: int) -> bool:
    """``True`` when the line before the one starting at *start* is blank."""
    if start == 0 or source[start - 1:start] != b"\n":
        return False
    previous = source.rfind(b"\n", 0, start - 1) + 1
    return source[previous:start].strip() == b""


def _skip_blank_lines(source: bytes, position: int) -> int:
    """Advance *position* (a line start) past any whitespace-only lines."""
    while position < len(source):
        line_end = source.find(b"\n", position)
        if line_end == -1 or source[position:line_end].strip():
            break
        position = line_end + 1
    return position


# ---------------------------------------------------------------------------
# Node predicates
# ---------------------------------------------------------------------------


def _has_token(node: Node, token: str) -> bool:
    return any(not c.is_named and c.type == token for c in node.children)


def _is_ambient_member(node: Node) -> bool:
    """Class fields declared with ``declare`` or ``abstract`` have no runtime form."""
    return node.type == "public_field_definition" and (
        _has_token(node, "declare") or _has_token(node, "abstract")
    )


def _is_type_only_export(node: Node) -> bool:
    for child in node.children:
        if not child.is_named and child.type == "type":
            return True
        if child.type in _ERASED_STATEMENTS:
            return True
    return False


def _is_this_parameter(node: Node) -> bool:
    pattern = node.child_by_field_name("pattern")
    return pattern is not None and pattern.type == "this"


def _is_constructor(node: Node) -> bool:
    name = node.child_by_field_name("name")
    return name is not None and node_text(name) == "constructor"


def _is_super_call(statement: Node) -> bool:
    if statement.type != "expression_statement" or not statement.named_children:
        return False
    call = statement.named_children[0]
    if call.type != "call_expression":
        return False
    function = call.child_by_field_name("function")
    return function is not None and function.type == "super"


def _member_key(node: Node) -> str:
    if node.type == "string":
        return node_text(node)[1:-1]
    return node_text(node)


def _numeric_value(node: Node) -> int | float | None:
    """Value of a numeric literal (optionally negated), else ``None``."""
    sign = 1
    if node.type == "unary_expression" and node_text(node).startswith("-"):
        argument = node.child_by_field_name("argument")
        if argument is None:
            return None
        node, sign = argument, -1
    if node.type != "number":
        return None
    text = node_text(node).replace("_", "")
    try:
        return sign * int(text, 0)
    except ValueError:
        try:
            return sign * float(text)
        except ValueError:
            return None


def _format_number(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
