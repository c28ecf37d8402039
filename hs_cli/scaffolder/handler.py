"""Template handler contract and the generic feature-removal engine.

A handler owns one template family (``vue3``, ``nuxt3``).  It copies the
family's base tree into the target directory, stamps the project name and
then strips every disabled feature by applying that feature's
:class:`~hs_cli.scaffolder.features.FeatureRule`.

Usage::

    handler = Vue3Handler(templates_dir)
    result = await handler.process_template(
        "./demo-app", {"typescript": False, "router": True}, "demo-app"
    )
    print(result.summary())
"""

from __future__ import annotations

import asyncio
import re
import shutil
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, Field
from rich.console import Console

from hs_cli.codemod import editor
from hs_cli.codemod.manifest import Manifest, ManifestReadError
from hs_cli.codemod.parsing import ParseError
from hs_cli.codemod.transpiler import ConversionError, convert_file, convert_tree, is_convertible
from hs_cli.scaffolder.features import Feature, FeatureRule, FeatureSelection, resolve_paths
from hs_cli.utils import remove_path

console = Console()

TYPESCRIPT = "typescript"

EditAction = Callable[..., bool]

EDIT_ACTIONS: dict[str, EditAction] = {
    "remove_import": editor.remove_import,
    "remove_function_call": editor.remove_function_call,
    "remove_vite_plugin": editor.remove_vite_plugin,
    "remove_array_entry": editor.remove_array_entry,
    "remove_imports_by_names": editor.remove_imports_by_names,
}

# Failures confined to a single feature's removal.
FEATURE_ERRORS = (ParseError, ConversionError, ManifestReadError, OSError)

_TITLE = re.compile(r"<title>.*?</title>", re.DOTALL)
_HEADING = re.compile(r"^#[ \t]+.*$", re.MULTILINE)
_TS_SUFFIX = re.compile(r"\.ts\b")


class TemplateNotFoundError(Exception):
    """Raised for an unknown template family or a missing template directory."""

    def __init__(self, name: str, path: str | Path | None = None):
        self.name = name
        self.path = Path(path) if path is not None else None
        where = f" at {self.path}" if self.path is not None else ""
        super().__init__(f"Template '{name}' not found{where}")


class TemplateCommands(BaseModel):
    """Shell commands to run inside a freshly generated project."""

    install_command: str = Field(default="npm install")
    start_command: str = Field(default="npm run dev")


@dataclass
class TemplateResult:
    """Outcome of generating or post-processing a project."""

    target_dir: Path
    template: str
    removed_features: list[str] = field(default_factory=list)
    converted_files: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.warnings

    def summary(self) -> str:
        """Human-readable one-paragraph summary."""
        lines = [f"Template '{self.template}' -> {self.target_dir}"]
        removed = ", ".join(self.removed_features) if self.removed_features else "none"
        lines.append(f"  Removed features: {removed}")
        if self.converted_files:
            lines.append(f"  Converted to JavaScript: {len(self.converted_files)} file(s)")
        for warning in self.warnings:
            lines.append(f"  Warning: {warning}")
        return "\n".join(lines)


class TemplateHandler(ABC):
    """Base class for template families.

    Subclasses provide the ordered feature list and the removal rule of each
    feature; the removal itself is generic.
    """

    # Root config stems converted by the TypeScript strip.
    config_files: tuple[str, ...] = ()
    # TypeScript devDependencies dropped by the TypeScript strip.
    typescript_dev_dependencies: tuple[str, ...] = ("typescript", "vue-tsc")
    edit_actions: dict[str, EditAction] = EDIT_ACTIONS

    def __init__(self, templates_dir: str | Path, name: str) -> None:
        self.templates_dir = Path(templates_dir)
        self.name = name

    def get_name(self) -> str:
        return self.name

    @property
    def template_path(self) -> Path:
        return self.templates_dir / self.name

    @abstractmethod
    def get_features(self) -> list[Feature]:
        """Ordered feature toggles of this family."""

    @abstractmethod
    def get_rules(self) -> dict[str, FeatureRule]:
        """Removal rule per feature name."""

    def get_commands(self) -> TemplateCommands:
        return TemplateCommands()

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def process_template(
        self,
        target_dir: str | Path,
        features: FeatureSelection,
        project_name: str,
    ) -> TemplateResult:
        """Materialise the template in *target_dir* with *features* applied.

        Raises:
            TemplateNotFoundError: If the template directory does not exist.
                Nothing is written in that case.
            ManifestReadError: If the copied manifest is not valid JSON.
        """
        source = self.template_path
        if not source.is_dir():
            raise TemplateNotFoundError(self.name, source)

        target = Path(target_dir)
        await asyncio.to_thread(
            shutil.copytree,
            source,
            target,
            dirs_exist_ok=True,
            ignore=shutil.ignore_patterns("__pycache__"),
        )

        manifest = await asyncio.to_thread(Manifest.in_directory, target)
        await asyncio.to_thread(self.apply_project_name, target, project_name, manifest)

        result = await self.process_features(target, features, manifest)

        if manifest is not None:
            await asyncio.to_thread(manifest.save)
        return result

    def apply_project_name(self, target: Path, project_name: str, manifest: Manifest | None) -> None:
        """Stamp *project_name* into the manifest, ``<title>`` and README heading."""
        if manifest is not None:
            manifest.name = project_name

        index = target / "index.html"
        if index.is_file():
            html = index.read_text(encoding="utf-8")
            updated = _TITLE.sub(lambda _: f"<title>{project_name}</title>", html, count=1)
            if updated != html:
                index.write_text(updated, encoding="utf-8")

        readme = target / "README.md"
        if readme.is_file():
            text = readme.read_text(encoding="utf-8")
            updated = _HEADING.sub(lambda _: f"# {project_name}", text, count=1)
            if updated != text:
                readme.write_text(updated, encoding="utf-8")

    # ------------------------------------------------------------------
    # Feature removal
    # ------------------------------------------------------------------

    def removal_order(self, features: FeatureSelection) -> list[str]:
        """Disabled features in processing order: TypeScript first."""
        names = [f.name for f in self.get_features()]
        if TYPESCRIPT in names:
            names.remove(TYPESCRIPT)
            names.insert(0, TYPESCRIPT)
        return [name for name in names if not features.get(name, False)]

    async def process_features(
        self,
        target_dir: str | Path,
        features: FeatureSelection,
        manifest: Manifest | None = None,
    ) -> TemplateResult:
        """Remove every disabled feature from an already materialised project.

        When *manifest* is given the caller is responsible for saving it;
        otherwise the project's manifest is loaded and saved here.  A failure
        while removing one feature is recorded as a warning and the remaining
        features are still processed.
        """
        target = Path(target_dir)
        result = TemplateResult(target_dir=target, template=self.name)

        owns_manifest = manifest is None
        if owns_manifest:
            try:
                manifest = await asyncio.to_thread(Manifest.in_directory, target)
            except ManifestReadError as exc:
                self._warn(result, f"manifest: {exc}")

        rules = self.get_rules()
        for name in self.removal_order(features):
            rule = rules.get(name)
            if rule is None:
                continue
            try:
                await self.apply_removal(target, rule, manifest, result)
            except FEATURE_ERRORS as exc:
                self._warn(result, f"{name}: {exc}")
                continue
            result.removed_features.append(name)

        if owns_manifest and manifest is not None:
            await asyncio.to_thread(manifest.save)
        return result

    async def apply_removal(
        self,
        target: Path,
        rule: FeatureRule,
        manifest: Manifest | None,
        result: TemplateResult,
    ) -> None:
        """Apply one rule: strip TypeScript, edit the manifest, edit sources, delete paths."""
        if rule.transpile:
            await asyncio.to_thread(self.strip_typescript, target, manifest, result)

        if manifest is not None:
            manifest.remove_dependencies(rule.dependencies, "dependencies")
            manifest.remove_dependencies(rule.dev_dependencies, "devDependencies")
            manifest.remove_scripts(rule.scripts)

        for step in rule.edits:
            action = self.edit_actions[step.action]
            for path in resolve_paths(target, step.target):
                await asyncio.to_thread(action, path, *step.args)

        for pattern in rule.paths:
            for path in resolve_paths(target, pattern):
                await asyncio.to_thread(remove_path, path)

    def strip_typescript(self, target: Path, manifest: Manifest | None, result: TemplateResult) -> None:
        """Turn the project into plain JavaScript.

        Manifest scripts are rewritten, the root config files and ``src/`` are
        converted, and ``index.html`` is pointed at the JavaScript entry.  The
        TypeScript config files themselves are left to the rule's ``paths``.
        """
        if manifest is not None:
            manifest.remove_dependencies(self.typescript_dev_dependencies, "devDependencies")
            manifest.rewrite_scripts(_untyped_script)

        for stem in self.config_files:
            for path in resolve_paths(target, f"{stem}.*"):
                if not is_convertible(path):
                    continue
                try:
                    result.converted_files.append(convert_file(path))
                except ConversionError as exc:
                    self._warn(result, str(exc))

        converted, failures = convert_tree(target / "src")
        result.converted_files.extend(converted)
        for _path, message in failures:
            result.warnings.append(message)

        index = target / "index.html"
        if index.is_file():
            html = index.read_text(encoding="utf-8")
            updated = html.replace("/src/main.ts", "/src/main.js")
            if updated != html:
                index.write_text(updated, encoding="utf-8")

    @staticmethod
    def _warn(result: TemplateResult, message: str) -> None:
        console.print(f"  [yellow]Warning: {message}[/yellow]")
        result.warnings.append(message)


def _untyped_script(name: str, command: str) -> str | None:
    """Script rewrite applied when TypeScript is removed."""
    if name in ("type", "type-check"):
        return None
    if name == "build":
        segments = [s.strip() for s in command.split("&&")]
        kept = [s for s in segments if "vue-tsc" not in s]
        if not kept:
            return None
        command = " && ".join(kept)
    return _TS_SUFFIX.sub(".js", command)
