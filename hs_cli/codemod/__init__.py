"""Source rewriting toolkit: structural edits, manifest access, TypeScript strip."""

from hs_cli.codemod.manifest import Manifest, ManifestReadError
from hs_cli.codemod.parsing import ParseError
from hs_cli.codemod.transpiler import ConversionError, convert_file, convert_tree, to_untyped

__all__ = [
    "ConversionError",
    "Manifest",
    "ManifestReadError",
    "ParseError",
    "convert_file",
    "convert_tree",
    "to_untyped",
]
