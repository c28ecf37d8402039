"""Nuxt 3 template family.

Nuxt keeps ``typescript`` and ``vue-tsc`` as dev dependencies even in a
JavaScript project because it uses them internally, so removing TypeScript
here means converting the sources and switching the build-time type check
off in ``nuxt.config`` instead of dropping the packages.
"""

from __future__ import annotations

import re
from pathlib import Path

from tree_sitter import Node

from hs_cli.codemod.manifest import Manifest
from hs_cli.codemod.parsing import (
    Edit,
    apply_edits,
    callee_name,
    first_argument,
    indentation_at,
    node_text,
    parse_source,
    read_source,
    string_value,
    walk,
)
from hs_cli.scaffolder.features import EditStep, Feature, FeatureRule
from hs_cli.scaffolder.handler import EDIT_ACTIONS, TemplateHandler, TemplateResult

NUXT_CONFIG = "nuxt.config.*"

# Versions used when the template does not declare them already.
RETAINED_TYPESCRIPT_DEPENDENCIES = {"typescript": "^5.0.0", "vue-tsc": "^1.0.0"}

_CONFIG_OPENING = "export default defineNuxtConfig({"
_TYPE_CHECK_ENTRY = "typescript: { typeCheck: false },"
_TYPE_CHECK_VALUE = re.compile(r"(typeCheck\s*:\s*)(?!false\b)[\w'\"]+")


def disable_type_check(file: str | Path) -> bool:
    """Set ``typescript.typeCheck`` to ``false`` in a Nuxt config file.

    An existing ``typeCheck`` value is replaced rather than shadowed by a
    second key.  Falls back to text insertion when the file does not parse.

    Returns:
        ``True`` if the file was modified.
    """
    path = Path(file)
    if not path.is_file():
        return False
    source = read_source(path)
    tree = parse_source(source, path)

    config = None if tree.root_node.has_error else _nuxt_config_object(tree.root_node)
    if config is None:
        content = _disable_type_check_text(source.decode("utf-8")).encode("utf-8")
    else:
        content = apply_edits(source, _type_check_edits(source, config))

    if content == source:
        return False
    path.write_bytes(content)
    return True


def _nuxt_config_object(root: Node) -> Node | None:
    for node in walk(root):
        if node.type == "call_expression" and callee_name(node) == "defineNuxtConfig":
            argument = first_argument(node)
            if argument is not None and argument.type == "object":
                return argument
    return None


def _property(obj: Node, key: str) -> Node | None:
    for pair in obj.named_children:
        if pair.type != "pair":
            continue
        key_node = pair.child_by_field_name("key")
        if key_node is None:
            continue
        name = string_value(key_node) if key_node.type == "string" else node_text(key_node)
        if name == key:
            return pair
    return None


def _insert_first(source: bytes, obj: Node, entry: str) -> Edit:
    """Insert *entry* as the first property of *obj*."""
    pairs = [c for c in obj.named_children if c.type != "comment"]
    anchor = obj.start_byte + 1
    if not pairs:
        indent = indentation_at(source, obj.start_byte)
        return anchor, anchor, f"\n{indent}  {entry}\n{indent}".encode("utf-8")
    first = pairs[0]
    if first.start_point[0] == obj.start_point[0]:
        return anchor, anchor, f" {entry}".encode("utf-8")
    indent = indentation_at(source, first.start_byte)
    return anchor, anchor, f"\n{indent}{entry}".encode("utf-8")


def _type_check_edits(source: bytes, config: Node) -> list[Edit]:
    typescript = _property(config, "typescript")
    if typescript is None:
        return [_insert_first(source, config, _TYPE_CHECK_ENTRY)]

    value = typescript.child_by_field_name("value")
    if value is None or value.type != "object":
        start = value.start_byte if value is not None else typescript.end_byte
        end = value.end_byte if value is not None else typescript.end_byte
        return [(start, end, b"{ typeCheck: false }")]

    type_check = _property(value, "typeCheck")
    if type_check is None:
        return [_insert_first(source, value, "typeCheck: false,")]
    current = type_check.child_by_field_name("value")
    if current is None or node_text(current) == "false":
        return []
    return [(current.start_byte, current.end_byte, b"false")]


def _disable_type_check_text(text: str) -> str:
    if _TYPE_CHECK_VALUE.search(text):
        return _TYPE_CHECK_VALUE.sub(r"\1false", text, count=1)
    if re.search(r"typeCheck\s*:\s*false\b", text):
        return text
    if _CONFIG_OPENING in text:
        return text.replace(_CONFIG_OPENING, f"{_CONFIG_OPENING}\n  {_TYPE_CHECK_ENTRY}", 1)
    suffix = "" if text.endswith("\n") or not text else "\n"
    return f"{text}{suffix}\n{_CONFIG_OPENING}\n  {_TYPE_CHECK_ENTRY}\n}})\n"


NUXT3_FEATURES = [
    Feature(name="typescript", display_message="TypeScript"),
    Feature(name="unocss", display_message="UnoCSS (atomic CSS)"),
    Feature(name="sass", display_message="Sass (CSS preprocessor)"),
    Feature(name="vueuse", display_message="VueUse (composition utilities)"),
    Feature(name="nuxt-image", display_message="Nuxt Image (image optimisation)"),
    Feature(name="auto-import", display_message="Auto Import (API auto-import)"),
    Feature(name="components", display_message="Components (component auto-registration)"),
]

NUXT3_RULES = {
    "typescript": FeatureRule(
        scripts=("type", "type-check"),
        paths=("tsconfig.json", "components.d.ts", "src/auto-import.d.ts"),
        edits=(EditStep("disable_type_check", NUXT_CONFIG),),
        transpile=True,
    ),
    "unocss": FeatureRule(
        dev_dependencies=("unocss", "@unocss/nuxt"),
        paths=("uno.config.*",),
        edits=(EditStep("remove_array_entry", NUXT_CONFIG, ("@unocss/nuxt",)),),
    ),
    "sass": FeatureRule(dev_dependencies=("sass",)),
    "vueuse": FeatureRule(
        dev_dependencies=("@vueuse/core", "@vueuse/nuxt"),
        edits=(EditStep("remove_array_entry", NUXT_CONFIG, ("@vueuse/nuxt",)),),
    ),
    "nuxt-image": FeatureRule(
        dependencies=("@nuxt/image",),
        edits=(EditStep("remove_array_entry", NUXT_CONFIG, ("@nuxt/image",)),),
    ),
    "auto-import": FeatureRule(
        dev_dependencies=("unplugin-auto-import",),
        edits=(
            EditStep("remove_import", NUXT_CONFIG, ("unplugin-auto-import/vite",)),
            EditStep("remove_vite_plugin", NUXT_CONFIG, ("AutoImport",)),
        ),
    ),
    "components": FeatureRule(
        dev_dependencies=("unplugin-vue-components",),
        edits=(
            EditStep("remove_import", NUXT_CONFIG, ("unplugin-vue-components/vite",)),
            EditStep("remove_vite_plugin", NUXT_CONFIG, ("Components",)),
        ),
    ),
}


class Nuxt3Handler(TemplateHandler):
    """Handler for the ``nuxt3`` template."""

    config_files = ("nuxt.config", "uno.config")
    typescript_dev_dependencies = ()
    edit_actions = {**EDIT_ACTIONS, "disable_type_check": disable_type_check}

    def __init__(self, templates_dir: str | Path) -> None:
        super().__init__(templates_dir, "nuxt3")

    def get_features(self) -> list[Feature]:
        return list(NUXT3_FEATURES)

    def get_rules(self) -> dict[str, FeatureRule]:
        return NUXT3_RULES

    def strip_typescript(self, target: Path, manifest: Manifest | None, result: TemplateResult) -> None:
        super().strip_typescript(target, manifest, result)
        if manifest is not None:
            for name, version in RETAINED_TYPESCRIPT_DEPENDENCIES.items():
                manifest.ensure_dependency(name, version)
