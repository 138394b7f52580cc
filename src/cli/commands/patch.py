"""Patch commands for the vendored application checkout.

Commands:
    patch-extract          - Write all repository changes to one patch file
    patch-apply-and-build  - Revert, pick a version, apply a patch, build images
"""

from typing import Annotated

import typer

from src.cli.context import get_cli_context
from src.cli.shared.console import with_error_handling
from src.infra.patch import PatchApplyWorkflow, PatchExtractor


@with_error_handling
def patch_extract(
    ctx: typer.Context,
    output_file: Annotated[
        str | None,
        typer.Argument(
            help="Patch file to write (default: patch-twenty-changes.patch)",
            show_default=False,
        ),
    ] = None,
) -> None:
    """📤 Extract all changes of the vendored repository as a patch.

    Includes staged changes, unstaged modifications, deletions and new
    untracked files. The repository's staged/unstaged state is left as it was.

    Examples:
        twenty-ops patch-extract
        twenty-ops patch-extract my-patch.patch
    """
    cli = get_cli_context(ctx)
    cli.console.print_header("Patch Extraction")

    result = PatchExtractor(cli.commands, cli.settings, console=cli.console).extract(
        output_file
    )
    if result.path is None:
        return

    name = output_file or cli.settings.default_patch_file
    cli.console.print("\nTo apply this patch to another repository:")
    cli.console.print(f"  git apply {name}")
    cli.console.print("\nTo apply it here and rebuild the images:")
    cli.console.print(f"  twenty-ops patch-apply-and-build {name}")
    cli.console.ok("🎉 Patch extraction completed successfully!")


@with_error_handling
def patch_apply_and_build(
    ctx: typer.Context,
    patch_file: Annotated[
        str | None,
        typer.Argument(
            help="Patch file to apply (default: patch-twenty-changes.patch)",
            show_default=False,
        ),
    ] = None,
    fetch: Annotated[
        bool,
        typer.Option(
            "--fetch/--no-fetch",
            help="Fetch tags from the remote before listing versions",
        ),
    ] = True,
) -> None:
    """🔨 Revert the repository, select a version, apply a patch and build.

    Steps:
      1. Revert all changes in the vendored repository (asks first)
      2. Pick HEAD or one of the newest tags to check out
      3. Apply the patch, falling back to a 3-way merge
      4. Build the Docker images with docker compose

    Examples:
        twenty-ops patch-apply-and-build
        twenty-ops patch-apply-and-build my-custom-patch.patch --no-fetch
    """
    cli = get_cli_context(ctx)
    cli.console.print_header("Patch Apply & Docker Build")

    workflow = PatchApplyWorkflow(
        cli.commands,
        cli.settings,
        console=cli.console,
        patch_file=patch_file,
        fetch=fetch,
    )
    result = workflow.run()
    if result.error is not None:
        raise result.error
