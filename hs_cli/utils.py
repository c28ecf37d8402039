"""Shared utility functions for hs-cli.

Provides JSON I/O that round-trips ``package.json`` files faithfully,
project-name validation, file-system helpers and Rich-based console output.
"""

from __future__ import annotations

import json
import re
import shutil
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

console = Console()

PROJECT_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

# ---------------------------------------------------------------------------
# Name helpers
# ---------------------------------------------------------------------------


def validate_project_name(name: str) -> bool:
    """Return ``True`` if *name* only contains letters, digits, ``-`` and ``_``.

    Examples::

        validate_project_name("demo-app") -> True
        validate_project_name("demo app") -> False
    """
    return bool(PROJECT_NAME_PATTERN.match(name))


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> Any:
    """Load and parse a JSON file.

    Object key order is preserved.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    raw = Path(path).read_text(encoding="utf-8")
    return json.loads(raw)


def dump_json(data: Any) -> str:
    """Serialise *data* the way npm writes ``package.json``.

    Two-space indentation, non-ASCII characters kept verbatim and a trailing
    newline.
    """
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def is_empty_dir(path: str | Path) -> bool:
    """``True`` when *path* does not exist or is a directory with no entries."""
    dir_path = Path(path)
    if not dir_path.exists():
        return True
    return dir_path.is_dir() and not any(dir_path.iterdir())


def clear_dir(path: str | Path) -> None:
    """Remove every entry inside *path*, keeping the directory itself."""
    for entry in Path(path).iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()


def remove_path(path: str | Path) -> bool:
    """Delete a file or directory tree; returns ``False`` if nothing was there."""
    target = Path(path)
    if target.is_dir() and not target.is_symlink():
        shutil.rmtree(target)
        return True
    if target.exists() or target.is_symlink():
        target.unlink()
        return True
    return False


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def create_progress() -> Progress:
    """Create a Rich spinner for long-running scaffolding steps.

    Returns:
        A ``Progress`` instance suitable for use as a context manager.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
