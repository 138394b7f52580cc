"""Patch extraction from the vendored repository.

Produces one unified diff covering staged, unstaged and untracked changes.
The index is mutated while the diff is computed and restored afterwards,
so the repository's staged/unstaged partition is the same before and after.
"""

from dataclasses import dataclass, field
from pathlib import Path

from rich.markup import escape

from src.infra.config import OpsSettings
from src.infra.errors import ExternalCommandFailed, PreconditionMissing
from src.infra.shell import ShellCommands
from src.utils.console_like import ConsoleLike, coalesce_console
from src.utils.paths import count_lines, read_head


@dataclass
class PatchExtractResult:
    """Outcome of a patch extraction.

    `path` is None when the repository had nothing to extract.
    """

    path: Path | None
    size_bytes: int = 0
    line_count: int = 0
    changes: list[str] = field(default_factory=list)


def require_repository(repo_path: Path) -> None:
    """Ensure the vendored checkout exists and is a git repository.

    Raises:
        PreconditionMissing: If the directory or its .git is absent
    """
    if not repo_path.is_dir():
        raise PreconditionMissing(
            f"Directory '{repo_path.name}' does not exist!",
            details=f"Expected the repository at {repo_path}.",
        )
    if not (repo_path / ".git").exists():
        raise PreconditionMissing(f"Directory '{repo_path.name}' is not a git repository!")


class PatchExtractor:
    """Extracts all working-tree changes of the vendored repository as a patch."""

    def __init__(
        self,
        commands: ShellCommands,
        settings: OpsSettings,
        console: ConsoleLike | None = None,
    ) -> None:
        self._commands = commands
        self._settings = settings
        self._console = coalesce_console(console)
        self.project_root = commands.project_root

    def extract(self, output_file: str | None = None) -> PatchExtractResult:
        """Write every change in the repository to a single patch file.

        Args:
            output_file: Patch path, relative to the project directory
                        (default: the configured default patch file)

        Returns:
            PatchExtractResult; `path` is None if there was nothing to extract

        Raises:
            PreconditionMissing: repository missing
            ExternalCommandFailed: staging or diffing failed
        """
        git = self._commands.git
        require_repository(git.repo_path)

        name = output_file or self._settings.default_patch_file
        patch_path = Path(name)
        if not patch_path.is_absolute():
            patch_path = self.project_root / patch_path

        self._console.info("Extracting patches from repository...")
        self._console.info(f"Repository path: {git.repo_path}")

        status = git.get_status()
        if not status.is_git_repo:
            raise ExternalCommandFailed(f"Unable to read git status in {git.repo_path}")
        if status.is_clean:
            self._console.info("No changes found in the repository.")
            self._console.print(
                "[dim]No staged changes, unstaged changes, or new files to include in patch.[/dim]"
            )
            return PatchExtractResult(path=None)

        changes = git.short_status().splitlines()
        self._console.print("Found the following changes to include in the patch:")
        for change in changes:
            self._console.print(f"  {escape(change)}")

        self._console.info("Generating patch...")
        self._write_patch(patch_path)

        size_bytes = patch_path.stat().st_size
        line_count = count_lines(patch_path)
        self._console.ok(f"Patch successfully created: {name}")
        self._console.print(f"   Size: {size_bytes} bytes")
        self._console.print(f"   Lines: {line_count}")
        self._show_preview(patch_path, line_count)

        return PatchExtractResult(
            path=patch_path,
            size_bytes=size_bytes,
            line_count=line_count,
            changes=changes,
        )

    def _write_patch(self, patch_path: Path) -> None:
        """Stage everything, diff the index against HEAD, then restore the index."""
        git = self._commands.git

        snapshot = git.snapshot_index()
        if snapshot is None:
            self._console.warn(
                "Could not snapshot the index; previously staged changes will be unstaged."
            )

        try:
            staged = git.stage_all()
            if not staged.success:
                raise ExternalCommandFailed(
                    "Failed to stage changes!", details=staged.output or None
                )

            diff = git.write_staged_diff(patch_path)
            if not diff.success:
                if patch_path.exists():
                    patch_path.unlink()
                raise ExternalCommandFailed(
                    "Failed to create patch file!", details=diff.output or None
                )
        finally:
            restored = (
                git.restore_index(snapshot) if snapshot is not None else git.reset_index()
            )
            if not restored.success:
                self._console.warn(
                    f"Failed to restore the index: {restored.output}"
                )

    def _show_preview(self, path: Path, line_count: int) -> None:
        preview_lines = self._settings.patch_preview_lines
        if preview_lines <= 0:
            return
        self._console.print(f"\n[bold]Preview (first {preview_lines} lines):[/bold]")
        for line in read_head(path, preview_lines):
            self._console.print(escape(line))
        if line_count > preview_lines:
            self._console.print(
                f"\n[dim]... (showing first {preview_lines} lines of {line_count} total lines)[/dim]"
            )
