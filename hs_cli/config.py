"""hs-cli configuration.

Typed settings for the CLI.  Values come, in increasing priority, from the
defaults below, an ``hs-cli.config.json`` file in the working directory and
``HS_CLI_*`` environment variables.  Command-line flags override all of them.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

CONFIG_FILENAME = "hs-cli.config.json"

PACKAGED_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

_ENV_FIELDS = {
    "HS_CLI_TEMPLATES_DIR": "templates_dir",
    "HS_CLI_DEFAULT_TEMPLATE": "default_template",
    "HS_CLI_OUTPUT_DIR": "output_dir",
}


class Config(BaseModel):
    """Global hs-cli configuration."""

    templates_dir: Path = Field(
        default=PACKAGED_TEMPLATES_DIR,
        description="Directory holding one sub-directory per template family",
    )
    default_template: str = Field(default="vue3")
    output_dir: Path = Field(default=Path("."), description="Parent directory for new projects")
    force: bool = Field(default=False, description="Overwrite non-empty target directories")

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Persist the configuration as JSON.

        Args:
            path: Destination file. Defaults to ``./hs-cli.config.json``.

        Returns:
            The path where the file was written.
        """
        target = Path(path) if path is not None else Path(CONFIG_FILENAME)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2) + "\n", encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a configuration previously written by :meth:`save`."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls, base: "Config | None" = None) -> "Config":
        """Apply ``HS_CLI_*`` environment variables on top of *base*.

        Recognised variables (all optional):
            HS_CLI_TEMPLATES_DIR, HS_CLI_DEFAULT_TEMPLATE, HS_CLI_OUTPUT_DIR.
        """
        overrides: dict[str, Any] = {}
        for variable, field_name in _ENV_FIELDS.items():
            if os.environ.get(variable):
                overrides[field_name] = os.environ[variable]
        values = base.model_dump() if base is not None else {}
        values.update(overrides)
        return cls.model_validate(values)

    @classmethod
    def discover(cls, cwd: Path | None = None) -> "Config":
        """Load ``hs-cli.config.json`` from *cwd* if present, then apply the environment."""
        directory = Path(cwd) if cwd is not None else Path.cwd()
        config_file = directory / CONFIG_FILENAME
        base = cls.load(config_file) if config_file.is_file() else None
        return cls.from_env(base)
