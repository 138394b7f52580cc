"""Data types for shell command results.

This module contains the dataclasses shared by the command runner and the
tool-specific command modules.
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "CommandResult",
    "GitStatus",
]


@dataclass
class CommandResult:
    """Result of a command execution."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0

    @property
    def output(self) -> str:
        """Stripped stdout, falling back to stderr when stdout is empty."""
        return self.stdout.strip() or self.stderr.strip()


@dataclass
class GitStatus:
    """Git repository status information.

    Attributes:
        is_git_repo: Whether the directory is a git repository
        is_clean: Whether the working tree has no changes (including untracked)
        short_sha: Short commit SHA (8 chars) of HEAD, or None if not available
        porcelain: Raw `git status --porcelain` output
    """

    is_git_repo: bool
    is_clean: bool
    short_sha: str | None
    porcelain: str = ""
