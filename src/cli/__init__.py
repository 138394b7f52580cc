"""Main CLI application module.

This module provides the main entry point for the twenty-ops CLI, the
operator toolkit for the self-hosted Twenty deployment.

Commands:
- backup: Timestamped database dump plus the latest alias
- restore: Destructive restore from a dump
- patch-extract: Capture changes of the vendored checkout as one patch
- patch-apply-and-build: Revert, select version, apply patch, build images
"""

import sys
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from .commands import backup, patch_apply_and_build, patch_extract, restore
from .context import build_cli_context

# Create the main CLI application
app = typer.Typer(
    help="🛠️  twenty-ops - Backup, restore and patch tooling for a self-hosted Twenty stack",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def configure_logging(verbose: bool) -> None:
    """Send loguru output to stderr; debug level shows every external command."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "WARNING",
        format="<dim>{time:HH:mm:ss}</dim> <level>{level: <8}</level> {message}",
    )


@app.callback()
def main_callback(
    ctx: typer.Context,
    project_dir: Annotated[
        Path | None,
        typer.Option(
            "--project-dir",
            "-C",
            help="Directory holding docker-compose.yml, .env and the twenty checkout "
            "(default: $TWENTY_OPS_PROJECT_DIR or the current directory)",
            file_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log every external command"),
    ] = False,
) -> None:
    configure_logging(verbose)
    ctx.obj = build_cli_context(project_dir)


app.command("backup")(backup)
app.command("restore")(restore)
app.command("patch-extract")(patch_extract)
app.command("patch-apply-and-build")(patch_apply_and_build)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
