"""Docker Compose command abstractions.

This module wraps the compose invocations the operator tools need:
running psql/pg_dump inside the database service and building images.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class ComposeCommands:
    """Docker Compose shell commands with consistent defaults.

    Provides operations for:
    - Executing psql and pg_dump inside the database service
    - Detecting the available compose invocation
    - Building the stack's images
    """

    def __init__(
        self,
        runner: CommandRunner,
        *,
        env_file: Path,
        db_service: str,
        db_user: str,
    ) -> None:
        """Initialize Docker Compose commands.

        Args:
            runner: Command runner for executing shell commands
            env_file: Environment file passed to `docker compose --env-file`
            db_service: Name of the Postgres service in the compose file
            db_user: Postgres role used for psql and pg_dump
        """
        self._runner = runner
        self._env_file = env_file
        self._db_service = db_service
        self._db_user = db_user

    def _base_cmd(self) -> list[str]:
        return ["docker", "compose", "--env-file", str(self._env_file)]

    def _exec_cmd(self, *args: str) -> list[str]:
        return self._base_cmd() + ["exec", "-T", self._db_service, *args]

    # =========================================================================
    # Database service
    # =========================================================================

    def psql(self, database: str, sql: str, *, tuples_only: bool = False) -> CommandResult:
        """Run a single SQL statement through psql in the database service.

        Args:
            database: Database to connect to
            sql: Statement passed with `-c`
            tuples_only: Pass `-t` so stdout holds bare values
        """
        args = ["psql", "-U", self._db_user, "-d", database]
        if tuples_only:
            args.append("-t")
        args.extend(["-c", sql])
        return self._runner.run(self._exec_cmd(*args))

    def psql_scalar(self, database: str, sql: str) -> str:
        """Run a query and return its output with all whitespace removed."""
        result = self.psql(database, sql, tuples_only=True)
        return "".join(result.stdout.split())

    def psql_from_file(self, database: str, sql_file: Path) -> CommandResult:
        """Stream a SQL file into psql."""
        return self._runner.run(
            self._exec_cmd("psql", "-U", self._db_user, "-d", database),
            input_file=sql_file,
        )

    def pg_dump(self, database: str, output_file: Path) -> CommandResult:
        """Dump a database as plain SQL into a local file."""
        return self._runner.run(
            self._exec_cmd("pg_dump", "-U", self._db_user, database),
            output_file=output_file,
        )

    # =========================================================================
    # Image builds
    # =========================================================================

    def detect_compose_command(self) -> list[str] | None:
        """Pick the compose invocation available on this host.

        Prefers the integrated `docker compose` plugin over the standalone
        legacy `docker-compose` binary.

        Returns:
            Command prefix, or None when neither is usable
        """
        if self._runner.which("docker"):
            if self._runner.run(["docker", "compose", "version"]).success:
                return ["docker", "compose"]
        if self._runner.which("docker-compose"):
            return ["docker-compose"]
        return None

    def build(self, compose_cmd: list[str]) -> CommandResult:
        """Build all images, streaming output to the terminal."""
        return self._runner.run([*compose_cmd, "build"], capture_output=False)
