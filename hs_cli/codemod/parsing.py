"""tree-sitter plumbing shared by the structural source edits.

Sources are parsed with the TypeScript grammar (TSX for ``.tsx``/``.jsx``
files); plain JavaScript parses cleanly with it as well.  All offsets handed
around by this module are *byte* offsets into the UTF-8 encoded source, which
is what tree-sitter reports, so edits stay correct for files containing
non-ASCII comments.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

TS_LANGUAGE = Language(tree_sitter_typescript.language_typescript())
TSX_LANGUAGE = Language(tree_sitter_typescript.language_tsx())

_TSX_SUFFIXES = {".tsx", ".jsx"}

# (start, end, replacement) -- byte offsets into the encoded source.
Edit = tuple[int, int, bytes]


class ParseError(Exception):
    """Raised when a source file cannot be parsed as valid source."""

    def __init__(self, message: str, path: str | Path | None = None):
        self.path = Path(path) if path is not None else None
        super().__init__(message)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def language_for(path: str | Path | None) -> Language:
    """Pick the grammar for *path* based on its suffix."""
    if path is not None and Path(path).suffix in _TSX_SUFFIXES:
        return TSX_LANGUAGE
    return TS_LANGUAGE


def parse_source(source: bytes, path: str | Path | None = None) -> Tree:
    """Parse *source* and return the tree, even when it contains errors."""
    parser = Parser(language_for(path))
    return parser.parse(source)


def parse_strict(source: bytes, path: str | Path | None = None) -> Tree:
    """Parse *source*, raising :class:`ParseError` on any syntax error.

    tree-sitter always produces a tree; error and missing nodes are how it
    reports invalid input, so their presence is treated as a parse failure.
    """
    tree = parse_source(source, path)
    if tree.root_node.has_error:
        location = first_error_location(tree.root_node)
        where = f"{path}" if path is not None else "<source>"
        raise ParseError(f"Cannot parse {where} (syntax error near line {location})", path)
    return tree


def read_source(path: str | Path) -> bytes:
    """Read a source file as UTF-8 bytes, rejecting undecodable content."""
    raw = Path(path).read_bytes()
    try:
        raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(f"{path} is not valid UTF-8: {exc}", path) from exc
    return raw


def first_error_location(node: Node) -> int:
    """1-based line of the first error or missing node under *node*."""
    for child in walk(node):
        if child.type == "ERROR" or child.is_missing:
            return child.start_point[0] + 1
    return node.start_point[0] + 1


# ---------------------------------------------------------------------------
# Tree helpers
# ---------------------------------------------------------------------------


def walk(node: Node) -> Iterator[Node]:
    """Depth-first pre-order traversal of *node* and its descendants."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def node_text(node: Node) -> str:
    return (node.text or b"").decode("utf-8")


def string_value(node: Node) -> str | None:
    """Unquoted value of a ``string`` node, ``None`` for anything else."""
    if node.type != "string":
        return None
    return node_text(node)[1:-1]


def import_source(node: Node) -> str | None:
    """Module specifier of an ``import_statement`` node."""
    source = node.child_by_field_name("source")
    return string_value(source) if source is not None else None


def callee_name(call: Node) -> str | None:
    """Dotted name of a call's callee (``app.use`` or ``vueJsx``)."""
    function = call.child_by_field_name("function")
    if function is None:
        return None
    if function.type == "identifier":
        return node_text(function)
    if function.type == "member_expression":
        obj = function.child_by_field_name("object")
        prop = function.child_by_field_name("property")
        if obj is not None and prop is not None:
            return f"{node_text(obj)}.{node_text(prop)}"
    return None


def first_argument(call: Node) -> Node | None:
    arguments = call.child_by_field_name("arguments")
    if arguments is None:
        return None
    for child in arguments.named_children:
        if child.type != "comment":
            return child
    return None


def significant_siblings(node: Node) -> tuple[Node | None, Node | None]:
    """Previous and next siblings of *node*, skipping comments."""
    parent = node.parent
    if parent is None:
        return None, None
    siblings = [c for c in parent.children if c.type != "comment"]
    index = next(
        i for i, c in enumerate(siblings)
        if c.start_byte == node.start_byte and c.end_byte == node.end_byte
    )
    before = siblings[index - 1] if index > 0 else None
    after = siblings[index + 1] if index + 1 < len(siblings) else None
    return before, after


# ---------------------------------------------------------------------------
# Byte-range helpers
# ---------------------------------------------------------------------------


def line_range(source: bytes, start: int, end: int) -> tuple[int, int]:
    """Widen ``[start, end)`` to whole lines when it owns them.

    Leading indentation is included when only whitespace precedes *start* on
    its line.  A trailing ``;`` and the line break are included when only
    whitespace follows *end*.
    """
    line_start = source.rfind(b"\n", 0, start) + 1
    if source[line_start:start].strip(b" \t") == b"":
        start = line_start

    if source[end:end + 1] == b";":
        end += 1
    probe = end
    while probe < len(source) and source[probe:probe + 1] in (b" ", b"\t"):
        probe += 1
    if source[probe:probe + 2] == b"\r\n":
        end = probe + 2
    elif source[probe:probe + 1] == b"\n" or probe == len(source):
        end = probe + 1 if probe < len(source) else probe
    return start, end


def element_range(source: bytes, node: Node) -> tuple[int, int]:
    """Byte range covering a list element and one adjacent ``,`` separator.

    Works for array elements, parameters and specifiers alike.  Whole lines
    are taken when the element owned them.
    """
    before, after = significant_siblings(node)
    start, end = node.start_byte, node.end_byte
    if after is not None and after.type == ",":
        end = skip_spaces(source, after.end_byte)
    elif before is not None and before.type == ",":
        start = before.start_byte

    line_start = source.rfind(b"\n", 0, start) + 1
    line_end = source.find(b"\n", end)
    line_end = len(source) if line_end == -1 else line_end
    owns_line = (
        source[line_start:start].strip() == b""
        and source[end:line_end].strip() == b""
    )
    if owns_line:
        start = line_start
        end = min(line_end + 1, len(source))
    return start, end


def indentation_at(source: bytes, offset: int) -> str:
    """Leading whitespace of the line containing *offset*."""
    line_start = source.rfind(b"\n", 0, offset) + 1
    line = source[line_start:offset]
    return line[: len(line) - len(line.lstrip(b" \t"))].decode("utf-8")


def skip_spaces(source: bytes, offset: int) -> int:
    """Advance *offset* past spaces and tabs (not line breaks)."""
    while offset < len(source) and source[offset:offset + 1] in (b" ", b"\t"):
        offset += 1
    return offset


def apply_edits(source: bytes, edits: Iterable[Edit]) -> bytes:
    """Apply byte-range edits; an edit overlapping an earlier one is dropped."""
    ordered = sorted(edits, key=lambda e: (e[0], -e[1]))
    chunks: list[bytes] = []
    cursor = 0
    for start, end, replacement in ordered:
        if start < cursor:
            continue
        chunks.append(source[cursor:start])
        chunks.append(replacement)
        cursor = end
    chunks.append(source[cursor:])
    return b"".join(chunks)
