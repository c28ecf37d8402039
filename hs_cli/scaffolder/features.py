"""Feature toggles and the declarative removal rules behind them.

A template family declares an ordered list of :class:`Feature` toggles and,
for each one, a :class:`FeatureRule` describing everything that has to go
when the feature is switched off: manifest keys, files, and source edits.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

# Suffixes a ``.*`` path or edit target may resolve to.
SCRIPT_EXTENSIONS = (".ts", ".js", ".mts", ".mjs", ".cts", ".cjs")

FeatureSelection = dict[str, bool]


class Feature(BaseModel):
    """One user-selectable feature of a template family."""

    name: str = Field(..., description="Unique key, e.g. 'router'")
    display_message: str = Field(default="", description="Label shown in prompts")
    default_enabled: bool = Field(default=True)


@dataclass(frozen=True)
class EditStep:
    """A single source edit: ``action`` names a ``hs_cli.codemod.editor`` function."""

    action: str
    target: str
    args: tuple[Any, ...] = ()


@dataclass(frozen=True)
class FeatureRule:
    """Everything removed from a project when a feature is disabled."""

    dependencies: tuple[str, ...] = ()
    dev_dependencies: tuple[str, ...] = ()
    scripts: tuple[str, ...] = ()
    paths: tuple[str, ...] = ()
    edits: tuple[EditStep, ...] = ()
    transpile: bool = False


def build_feature_selection(
    features: Iterable[Feature],
    selected: Iterable[str] | None = None,
) -> FeatureSelection:
    """Turn a list of chosen feature names into a full on/off mapping.

    With ``selected=None`` every feature takes its default.  Unknown names in
    *selected* are kept as enabled entries; handlers simply ignore them.

    Examples::

        build_feature_selection(features, ["router"])
        -> {"typescript": False, "router": True, ...}
    """
    features = list(features)
    if selected is None:
        return {f.name: f.default_enabled for f in features}
    chosen = set(selected)
    selection = {f.name: f.name in chosen for f in features}
    for name in chosen:
        selection.setdefault(name, True)
    return selection


def parse_feature_list(value: str) -> list[str]:
    """Split a ``--features`` argument (``"router, pinia"``) into names."""
    return [part.strip() for part in value.split(",") if part.strip()]


def resolve_paths(root: Path, pattern: str) -> list[Path]:
    """Existing paths under *root* matching *pattern*.

    ``pattern`` is project-relative.  A trailing ``.*`` matches the stem
    with any of :data:`SCRIPT_EXTENSIONS`; anything else is a literal path.
    """
    if pattern.endswith(".*"):
        stem = pattern[:-2]
        candidates = [root / f"{stem}{ext}" for ext in SCRIPT_EXTENSIONS]
    else:
        candidates = [root / pattern]
    return [path for path in candidates if path.exists() or path.is_symlink()]
