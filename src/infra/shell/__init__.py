"""Shell command abstractions for the operator tools.

This package provides a thin, well-documented interface over the external
tools the operations delegate to:

- compose: docker compose exec (psql, pg_dump) and image builds
- git: operations on the vendored application checkout

Design Principles:
- Single Responsibility: Each module focuses on one tool
- Consistent Return Types: Commands return CommandResult instead of raising
- Explicit Paths: Commands receive working directories, never `cd`

Usage:
    from src.infra.shell import ShellCommands

    commands = ShellCommands(project_root, settings)
    if commands.git.get_status().is_clean:
        print("Nothing to extract")
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .compose import ComposeCommands
from .git import GitCommands
from .runner import CommandRunner
from .types import CommandResult, GitStatus

if TYPE_CHECKING:
    from src.infra.config import OpsSettings


class ShellCommands:
    """Unified interface for all shell command operations.

    Attributes:
        compose: Docker Compose commands (database service, builds)
        git: Git commands bound to the vendored repository
    """

    def __init__(
        self,
        project_root: Path,
        settings: OpsSettings,
        runner: CommandRunner | None = None,
    ) -> None:
        """Initialize the shell commands executor.

        Args:
            project_root: Directory holding the compose file and .env.
                         Commands will be executed from this directory by default.
            settings: Operator settings (service names, repository path, ...)
            runner: Optional runner override, mainly for tests
        """
        self._project_root = Path(project_root)
        self._runner = runner or CommandRunner(self._project_root)

        self.compose = ComposeCommands(
            self._runner,
            env_file=Path(settings.env_file),
            db_service=settings.db_service,
            db_user=settings.db_user,
        )
        self.git = GitCommands(self._runner, self._project_root / settings.repo_path)

    @property
    def project_root(self) -> Path:
        """Get the project root path."""
        return self._project_root

    @property
    def runner(self) -> CommandRunner:
        return self._runner


__all__ = [
    "ShellCommands",
    "CommandResult",
    "GitStatus",
    "ComposeCommands",
    "GitCommands",
    "CommandRunner",
]
