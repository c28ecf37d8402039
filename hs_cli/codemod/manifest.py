"""The ``package.json`` manifest of a generated project.

The manifest is read once, mutated in memory by every feature-removal step
and written back once at the end, so a half-processed project never carries a
half-edited manifest.  Key order is preserved on the round trip.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from hs_cli.utils import dump_json, load_json

MANIFEST_NAME = "package.json"


class ManifestReadError(Exception):
    """Raised when a manifest exists but cannot be read as a JSON object."""

    def __init__(self, message: str, path: str | Path | None = None):
        self.path = Path(path) if path is not None else None
        super().__init__(message)


class Manifest:
    """In-memory view of a ``package.json`` document."""

    def __init__(self, path: str | Path, data: dict[str, Any]) -> None:
        self.path = Path(path)
        self.data = data
        self._original = dump_json(data)

    # -- Loading -----------------------------------------------------------

    @classmethod
    def load(cls, path: str | Path) -> "Manifest":
        """Read the manifest at *path*.

        Raises:
            ManifestReadError: If the file is missing, is not valid JSON, or
                does not hold a JSON object.
        """
        file_path = Path(path)
        if not file_path.is_file():
            raise ManifestReadError(f"Manifest not found: {file_path}", file_path)
        try:
            data = load_json(file_path)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ManifestReadError(f"Cannot read manifest {file_path}: {exc}", file_path) from exc
        if not isinstance(data, dict):
            raise ManifestReadError(f"Manifest {file_path} is not a JSON object", file_path)
        return cls(file_path, data)

    @classmethod
    def load_optional(cls, path: str | Path) -> "Manifest | None":
        """Like :meth:`load` but returns ``None`` when the file does not exist."""
        if not Path(path).is_file():
            return None
        return cls.load(path)

    @classmethod
    def in_directory(cls, directory: str | Path) -> "Manifest | None":
        return cls.load_optional(Path(directory) / MANIFEST_NAME)

    # -- Accessors ---------------------------------------------------------

    @property
    def name(self) -> str | None:
        return self.data.get("name")

    @name.setter
    def name(self, value: str) -> None:
        self.data["name"] = value

    def section(self, name: str) -> dict[str, Any]:
        """Return a mapping section, or an empty dict when absent or malformed."""
        value = self.data.get(name)
        return value if isinstance(value, dict) else {}

    @property
    def dependencies(self) -> dict[str, Any]:
        return self.section("dependencies")

    @property
    def dev_dependencies(self) -> dict[str, Any]:
        return self.section("devDependencies")

    @property
    def scripts(self) -> dict[str, Any]:
        return self.section("scripts")

    # -- Mutations ---------------------------------------------------------

    def remove_dependencies(
        self, names: Iterable[str], section: str = "dependencies"
    ) -> list[str]:
        """Delete *names* from *section*; returns the names actually removed."""
        return _remove_keys(self.data.get(section), names)

    def remove_scripts(self, names: Iterable[str]) -> list[str]:
        return _remove_keys(self.data.get("scripts"), names)

    def ensure_dependency(self, name: str, version: str, section: str = "devDependencies") -> None:
        """Add *name* to *section* unless it is already declared there."""
        target = self.data.get(section)
        if not isinstance(target, dict):
            target = {}
            self.data[section] = target
        target.setdefault(name, version)

    def rewrite_scripts(self, rewrite: Callable[[str, str], str | None]) -> None:
        """Pass each script through ``rewrite(name, command)``.

        Returning ``None`` deletes the script; any other value replaces it.
        """
        scripts = self.data.get("scripts")
        if not isinstance(scripts, dict):
            return
        for name in list(scripts):
            command = scripts[name]
            if not isinstance(command, str):
                continue
            updated = rewrite(name, command)
            if updated is None:
                del scripts[name]
            else:
                scripts[name] = updated

    # -- Persistence -------------------------------------------------------

    @property
    def dirty(self) -> bool:
        return dump_json(self.data) != self._original

    def save(self, *, force: bool = False) -> bool:
        """Write the manifest if it changed since loading (or *force*).

        Returns:
            ``True`` when the file was written.
        """
        if not force and not self.dirty:
            return False
        content = dump_json(self.data)
        self.path.write_text(content, encoding="utf-8")
        self._original = content
        return True


def _remove_keys(section: Any, names: Iterable[str]) -> list[str]:
    if not isinstance(section, dict):
        return []
    removed = []
    for name in names:
        if name in section:
            del section[name]
            removed.append(name)
    return removed
