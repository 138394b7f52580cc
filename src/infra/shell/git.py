"""Git command abstractions.

This module provides commands for the vendored application checkout:
status inspection, patch extraction and application, reverting the
working tree, and tag/branch checkout.

Every command runs with the repository as its working directory, so no
caller ever needs to change the process-wide current directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .types import CommandResult, GitStatus

if TYPE_CHECKING:
    from .runner import CommandRunner


class GitCommands:
    """Git-related shell commands bound to one repository.

    Provides operations for:
    - Repository status and change detection
    - Index snapshot/restore around patch extraction
    - Reverting tracked and untracked changes
    - Tag listing and checkout
    - Strict and three-way patch application
    """

    def __init__(self, runner: CommandRunner, repo_path: Path) -> None:
        """Initialize Git commands.

        Args:
            runner: Command runner for executing shell commands
            repo_path: Path of the repository every command runs in
        """
        self._runner = runner
        self.repo_path = repo_path

    def _git(self, *args: str, output_file: Path | None = None) -> CommandResult:
        return self._runner.run(
            ["git", *args], cwd=self.repo_path, output_file=output_file
        )

    # =========================================================================
    # Status
    # =========================================================================

    def get_status(self) -> GitStatus:
        """Get the current git repository status.

        Returns:
            GitStatus with repository state information

        Example:
            >>> status = git.get_status()
            >>> if status.is_clean:
            ...     print(f"Clean repo at {status.short_sha}")
        """
        status_result = self._git("status", "--porcelain")
        if not status_result.success:
            return GitStatus(is_git_repo=False, is_clean=False, short_sha=None)

        porcelain = status_result.stdout.rstrip("\n")
        sha_result = self._git("rev-parse", "--short=8", "HEAD")
        short_sha = sha_result.stdout.strip() if sha_result.success else None

        return GitStatus(
            is_git_repo=True,
            is_clean=not porcelain.strip(),
            short_sha=short_sha,
            porcelain=porcelain,
        )

    def short_status(self) -> str:
        """Return `git status --short` output."""
        return self._git("status", "--short").stdout.rstrip("\n")

    def has_uncommitted_changes(self) -> bool:
        """Check whether tracked files differ from HEAD (staged or not)."""
        return not self._git("diff-index", "--quiet", "HEAD", "--").success

    def changed_files(self) -> list[str]:
        """List tracked files with unstaged modifications."""
        result = self._git("diff", "--name-only")
        return [line for line in result.stdout.splitlines() if line.strip()]

    def untracked_files(self) -> list[str]:
        """List untracked files, honouring .gitignore."""
        result = self._git("ls-files", "--others", "--exclude-standard")
        return [line for line in result.stdout.splitlines() if line.strip()]

    # =========================================================================
    # Index manipulation
    # =========================================================================

    def stage_all(self) -> CommandResult:
        """Stage every change, including deletions and untracked files."""
        return self._git("add", "-A")

    def write_staged_diff(self, output_file: Path) -> CommandResult:
        """Write the diff between HEAD and the index to a file."""
        return self._git("diff", "--cached", output_file=output_file)

    def snapshot_index(self) -> str | None:
        """Record the current index as a tree object.

        Returns:
            Tree SHA, or None if the index cannot be written (e.g. unmerged paths)
        """
        result = self._git("write-tree")
        return result.stdout.strip() if result.success else None

    def restore_index(self, tree: str) -> CommandResult:
        """Replace the index with a previously snapshotted tree."""
        return self._git("read-tree", tree)

    def reset_index(self) -> CommandResult:
        """Unstage everything, keeping the working tree."""
        return self._git("reset", "--quiet")

    # =========================================================================
    # Revert
    # =========================================================================

    def unstage_all(self) -> CommandResult:
        """Equivalent of `git reset HEAD .`."""
        return self._git("reset", "HEAD", ".")

    def discard_tracked_changes(self) -> CommandResult:
        """Equivalent of `git checkout -- .`."""
        return self._git("checkout", "--", ".")

    def clean_untracked(self) -> CommandResult:
        """Remove untracked files and directories."""
        return self._git("clean", "-fd")

    # =========================================================================
    # Tags and checkout
    # =========================================================================

    def fetch_all_tags(self) -> CommandResult:
        return self._git("fetch", "--all", "--tags")

    def head_commit(self) -> str | None:
        result = self._git("rev-parse", "HEAD")
        return result.stdout.strip() if result.success else None

    def current_tag(self) -> str | None:
        """Return the tag HEAD points at exactly, or None."""
        result = self._git("describe", "--tags", "--exact-match", "HEAD")
        tag = result.stdout.strip()
        return tag if result.success and tag else None

    def current_branch(self) -> str:
        return self._git("branch", "--show-current").stdout.strip()

    def list_tags_newest_first(self, limit: int | None = None) -> list[str]:
        """List tags sorted by creation date, newest first.

        Args:
            limit: Maximum number of tags to return (default: all)
        """
        result = self._git("tag", "-l", "--sort=-creatordate")
        tags = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        return tags if limit is None else tags[:limit]

    def tag_date(self, tag: str) -> str | None:
        """Return the author date of the commit a tag points to."""
        result = self._git("log", "-1", "--format=%ai", tag)
        date = result.stdout.strip()
        return date if result.success and date else None

    def checkout(self, ref: str) -> CommandResult:
        return self._git("checkout", ref)

    def pull(self, remote: str, branch: str) -> CommandResult:
        return self._git("pull", remote, branch)

    # =========================================================================
    # Patch application
    # =========================================================================

    def apply_check(self, patch_file: Path) -> CommandResult:
        """Dry-run a strict patch application."""
        return self._git("apply", "--check", str(patch_file))

    def apply(self, patch_file: Path) -> CommandResult:
        return self._git("apply", str(patch_file))

    def apply_three_way(self, patch_file: Path) -> CommandResult:
        """Apply a patch, falling back to a 3-way merge using blob ancestry."""
        return self._git("apply", "--3way", str(patch_file))
