"""CLI context and dependency container."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import click
import typer

from src.cli.shared.console import CLIConsole, console
from src.infra.config import OpsSettings, load_settings
from src.infra.constants import DEFAULT_CONSTANTS, OpsConstants
from src.infra.shell import ShellCommands
from src.utils.paths import get_project_root


@dataclass(frozen=True)
class CLIContext:
    """Runtime dependencies for CLI commands."""

    console: CLIConsole
    project_root: Path
    settings: OpsSettings
    commands: ShellCommands
    constants: OpsConstants


def build_cli_context(project_dir: Path | None = None) -> CLIContext:
    """Build a fresh CLIContext.

    Raises:
        typer.Exit: If the settings file is invalid
    """
    project_root = get_project_root(project_dir)
    try:
        settings = load_settings(project_root)
    except ValueError as exc:
        console.handle_error("Invalid twenty-ops settings", str(exc))

    return CLIContext(
        console=console,
        project_root=project_root,
        settings=settings,
        commands=ShellCommands(project_root, settings),
        constants=DEFAULT_CONSTANTS,
    )


def get_cli_context(ctx: typer.Context | None = None) -> CLIContext:
    """Return the CLIContext from Typer, falling back to a new instance."""
    context = ctx or click.get_current_context(silent=True)
    if context and isinstance(context.obj, CLIContext):
        return context.obj
    return build_cli_context()
