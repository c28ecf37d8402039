"""Command-line entry point for hs-cli.

Commands::

    hs-cli create [name] [-t vue3|nuxt3] [-f a,b | --all | --none] [-d DIR] [--force] [-y]
    hs-cli templates
    hs-cli init [--force]

Running ``hs-cli`` without arguments starts an interactive ``create``.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from pydantic import ValidationError
from rich.markup import escape
from rich.prompt import Confirm, Prompt
from rich.table import Table

from hs_cli import __version__
from hs_cli.codemod.manifest import ManifestReadError
from hs_cli.config import CONFIG_FILENAME, Config
from hs_cli.scaffolder.factory import TemplateFactory
from hs_cli.scaffolder.features import build_feature_selection, parse_feature_list
from hs_cli.scaffolder.handler import TemplateHandler, TemplateNotFoundError
from hs_cli.utils import (
    clear_dir,
    console,
    create_progress,
    is_empty_dir,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
    validate_project_name,
)


class CommandError(Exception):
    """A user-facing failure; printed in red and exits with status 1."""


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hs-cli",
        description="Scaffold Vue 3 and Nuxt 3 projects with selectable features",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  hs-cli create demo-app -t vue3 -f typescript,router -y\n"
            "  hs-cli create shop -t nuxt3 --all -d ./projects\n"
            "  hs-cli templates\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command")

    create = subparsers.add_parser("create", help="Create a new project")
    create.add_argument("project_name", nargs="?", default=None, help="Project directory name")
    create.add_argument("--template", "-t", default=None, help="Template family (vue3, nuxt3)")
    selection = create.add_mutually_exclusive_group()
    selection.add_argument(
        "--features", "-f",
        default=None,
        help="Comma-separated features to enable; all others are removed",
    )
    selection.add_argument("--all", action="store_true", help="Enable every feature")
    selection.add_argument("--none", action="store_true", help="Disable every feature")
    create.add_argument(
        "--directory", "-d",
        default=None,
        help="Parent directory for the project (default: configured output_dir)",
    )
    create.add_argument("--templates-dir", default=None, help="Use templates from this directory")
    create.add_argument("--force", action="store_true", help="Overwrite a non-empty target directory")
    create.add_argument("--yes", "-y", action="store_true", help="Accept defaults, never prompt")

    subparsers.add_parser("templates", help="List available templates and their features")

    init = subparsers.add_parser("init", help=f"Write {CONFIG_FILENAME} in the current directory")
    init.add_argument("--force", action="store_true", help="Overwrite an existing config file")

    return parser


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


def _resolve_project_name(args: argparse.Namespace) -> str:
    name = args.project_name
    if name is None:
        if args.yes:
            raise CommandError("A project name is required with --yes")
        while True:
            name = Prompt.ask("Project name", default="my-app", console=console)
            if validate_project_name(name):
                break
            print_error("Use only letters, digits, '-' and '_'.")
    if not validate_project_name(name):
        raise CommandError(f"Invalid project name '{name}': use only letters, digits, '-' and '_'")
    return name


def _resolve_template(args: argparse.Namespace, factory: TemplateFactory, config: Config) -> TemplateHandler:
    name = args.template
    if name is None:
        if args.yes:
            name = config.default_template
        else:
            choices = factory.get_available_templates()
            default = config.default_template if config.default_template in choices else choices[0]
            name = Prompt.ask("Template", choices=choices, default=default, console=console)
    return factory.get_handler(name)


def _resolve_features(args: argparse.Namespace, handler: TemplateHandler) -> dict[str, bool]:
    features = handler.get_features()
    known = {f.name for f in features}

    if args.all:
        return build_feature_selection(features, known)
    if args.none:
        return build_feature_selection(features, [])
    if args.features is not None:
        chosen = parse_feature_list(args.features)
        unknown = [name for name in chosen if name not in known]
        if unknown:
            print_warning(f"Ignoring unknown feature(s) for {handler.get_name()}: {', '.join(unknown)}")
        return build_feature_selection(features, chosen)
    if args.yes:
        return build_feature_selection(features)

    return {
        f.name: Confirm.ask(f.display_message or f.name, default=f.default_enabled, console=console)
        for f in features
    }


def _prepare_target(target: Path, force: bool, assume_yes: bool) -> bool:
    """Make sure *target* may be written; returns ``False`` if the user declined."""
    if target.exists() and not target.is_dir():
        raise CommandError(f"{target} exists and is not a directory")
    if is_empty_dir(target):
        return True
    if not force:
        if assume_yes:
            raise CommandError(f"Directory {target} is not empty (use --force to overwrite)")
        if not Confirm.ask(f"Directory {target} is not empty. Overwrite?", default=False, console=console):
            return False
    clear_dir(target)
    return True


def cmd_create(args: argparse.Namespace) -> int:
    config = Config.discover()
    templates_dir = Path(args.templates_dir) if args.templates_dir else config.templates_dir
    factory = TemplateFactory(templates_dir)

    project_name = _resolve_project_name(args)
    handler = _resolve_template(args, factory, config)
    if not handler.template_path.is_dir():
        raise TemplateNotFoundError(handler.get_name(), handler.template_path)
    features = _resolve_features(args, handler)

    parent = Path(args.directory) if args.directory else config.output_dir
    target = parent / project_name
    if not _prepare_target(target, args.force or config.force, args.yes):
        print_warning("Cancelled.")
        return 0

    with create_progress() as progress:
        progress.add_task(f"Creating {project_name} from '{handler.get_name()}'...", total=None)
        result = asyncio.run(handler.process_template(target, features, project_name))

    for warning in result.warnings:
        print_warning(f"Warning: {warning}")

    enabled = [name for name, on in features.items() if on]
    print_summary_table(
        {
            "Project": project_name,
            "Template": handler.get_name(),
            "Location": str(target.resolve()),
            "Features": ", ".join(enabled) if enabled else "none",
            "Removed": ", ".join(result.removed_features) if result.removed_features else "none",
        },
        title="Project created",
    )

    commands = handler.get_commands()
    if result.ok:
        print_success("Done. Next steps:")
    else:
        print_warning(f"Done with {len(result.warnings)} warning(s). Next steps:")
    console.print(f"  cd {target}")
    console.print(f"  {commands.install_command}")
    console.print(f"  {commands.start_command}")
    return 0


# ---------------------------------------------------------------------------
# templates / init
# ---------------------------------------------------------------------------


def cmd_templates(args: argparse.Namespace) -> int:
    config = Config.discover()
    factory = TemplateFactory(config.templates_dir)

    table = Table(title="Available templates", show_header=True, header_style="bold cyan")
    table.add_column("Template", no_wrap=True)
    table.add_column("Features")
    for name in factory.get_available_templates():
        handler = factory.get_handler(name)
        table.add_row(name, ", ".join(f.name for f in handler.get_features()))
    console.print(table)
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    config_file = Path.cwd() / CONFIG_FILENAME
    if config_file.exists() and not args.force:
        if not Confirm.ask(f"{CONFIG_FILENAME} already exists. Overwrite?", default=False, console=console):
            print_warning("Initialisation cancelled.")
            return 0

    Config().save(config_file)
    print_success("Configuration initialised.")
    console.print(f"  [dim]{config_file}[/dim]")
    return 0


COMMANDS = {
    "create": cmd_create,
    "templates": cmd_templates,
    "init": cmd_init,
}


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``hs-cli`` and ``python -m hs_cli``."""
    arguments = sys.argv[1:] if argv is None else list(argv)
    parser = build_parser()
    args = parser.parse_args(arguments or ["create"])
    if args.command is None:
        args = parser.parse_args(["create", *arguments])
    command = COMMANDS[args.command]

    try:
        code = command(args)
    except (CommandError, TemplateNotFoundError, ManifestReadError, OSError) as exc:
        print_error(f"Error: {escape(str(exc))}")
        sys.exit(1)
    except ValidationError as exc:
        print_error(f"Error: invalid configuration: {escape(str(exc))}")
        sys.exit(1)
    except KeyboardInterrupt:
        print_error("Aborted.")
        sys.exit(1)

    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
