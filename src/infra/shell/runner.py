"""Command runner for executing shell commands.

This module provides the base command execution functionality used by
all specialized command modules.
"""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Mapping, Sequence
from contextlib import ExitStack
from pathlib import Path
from typing import IO

from loguru import logger

from .types import CommandResult


class CommandRunner:
    """Low-level command executor with consistent result handling.

    Commands never raise on a non-zero exit code; callers branch on the
    returned CommandResult instead. A missing executable is reported the
    way a shell would, with return code 127.

    All specialized command modules (git, docker compose) use this runner
    for actual command execution.
    """

    def __init__(self, project_root: Path) -> None:
        """Initialize the command runner.

        Args:
            project_root: Path to the project root directory.
                         Commands will be executed from this directory by default.
        """
        self.project_root = project_root

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        capture_output: bool = True,
        input_file: Path | None = None,
        output_file: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        """Execute a shell command and return structured result.

        Args:
            cmd: Command and arguments as a sequence
            cwd: Working directory (defaults to project_root)
            capture_output: Whether to capture stdout/stderr. When False the
                           process writes straight to the terminal.
            input_file: File streamed to the process on stdin
            output_file: File receiving the process stdout
            env: Full environment for the process (defaults to inherited)

        Returns:
            CommandResult with success status, output, and return code
        """
        workdir = cwd or self.project_root
        logger.debug(f"Running: {' '.join(cmd)} (cwd={workdir})")

        with ExitStack() as stack:
            try:
                stdin_handle = (
                    stack.enter_context(open(input_file, "rb")) if input_file else None
                )
                stdout_handle = (
                    stack.enter_context(open(output_file, "wb")) if output_file else None
                )
            except OSError as exc:
                logger.debug(f"Cannot open {exc.filename} for {cmd[0]}: {exc.strerror}")
                return CommandResult(
                    success=False,
                    stderr=f"{exc.filename}: {exc.strerror}",
                    returncode=1,
                )

            try:
                result = self._execute(
                    cmd,
                    cwd=workdir,
                    capture_output=capture_output,
                    stdin=stdin_handle,
                    stdout=stdout_handle,
                    env=env,
                )
            except FileNotFoundError:
                result = CommandResult(
                    success=False,
                    stderr=f"{cmd[0]}: command not found",
                    returncode=127,
                )

        logger.debug(f"Exit code {result.returncode}: {cmd[0]}")
        return result

    def _execute(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path,
        capture_output: bool,
        stdin: IO[bytes] | None,
        stdout: IO[bytes] | None,
        env: Mapping[str, str] | None,
    ) -> CommandResult:
        process_env = dict(env) if env is not None else None

        if stdout is not None:
            # Redirected stdout is binary; only stderr is captured.
            completed = subprocess.run(
                list(cmd),
                cwd=cwd,
                stdin=stdin,
                stdout=stdout,
                stderr=subprocess.PIPE if capture_output else None,
                env=process_env,
            )
            stderr = (completed.stderr or b"").decode("utf-8", errors="replace")
            return CommandResult(
                success=completed.returncode == 0,
                stdout="",
                stderr=stderr,
                returncode=completed.returncode,
            )

        completed_text = subprocess.run(
            list(cmd),
            cwd=cwd,
            stdin=stdin,
            capture_output=capture_output,
            text=True,
            env=process_env,
        )
        return CommandResult(
            success=completed_text.returncode == 0,
            stdout=completed_text.stdout or "",
            stderr=completed_text.stderr or "",
            returncode=completed_text.returncode,
        )

    def which(self, executable: str) -> str | None:
        """Return the full path of an executable on PATH, or None."""
        return shutil.which(executable)
