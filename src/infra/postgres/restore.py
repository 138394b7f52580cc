"""PostgreSQL restore functionality.

Drops and recreates the application database, then streams a plain SQL
dump into it through the compose `db` service.

The drop is destructive and there is no rollback: if streaming the dump
fails, the database is left partially restored and the error says so.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from src.infra.config import OpsSettings
from src.infra.errors import ExternalCommandFailed, PreconditionMissing, UserDeclined
from src.infra.postgres.environment import require_compose_environment
from src.infra.shell import ShellCommands
from src.utils.console_like import OperatorConsole, coalesce_console
from src.utils.paths import count_lines


@dataclass
class RestoreResult:
    """Outcome of a completed restore."""

    dump_file: Path
    size_bytes: int
    line_count: int
    table_count: int


def resolve_dump_file(
    project_root: Path, settings: OpsSettings, dump_file: str | None = None
) -> Path:
    """Resolve the dump to restore, defaulting to the latest alias.

    Symlinks are followed, so a dangling alias counts as missing.

    Raises:
        PreconditionMissing: If the file does not exist
    """
    name = dump_file or settings.latest_link
    path = Path(name)
    if not path.is_absolute():
        path = project_root / path

    if not path.is_file():
        raise PreconditionMissing(
            f"Dump file '{name}' does not exist!",
            details=f"Please ensure the dump file is in {project_root}.",
        )
    return path


def parse_table_count(raw: str) -> int:
    """Parse a psql tuples-only count; anything unparsable counts as zero."""
    try:
        return int(raw)
    except ValueError:
        return 0


class PostgresRestore:
    """Restores a PostgreSQL database from a plain SQL dump.

    Steps:
    1. Drop and recreate the target database (after confirmation)
    2. Stream the dump into the fresh database
    3. Count tables in the public schema as a sanity check
    """

    def __init__(
        self,
        commands: ShellCommands,
        settings: OpsSettings,
        console: OperatorConsole | None = None,
    ) -> None:
        self._commands = commands
        self._settings = settings
        self._console = coalesce_console(console)
        self.project_root = commands.project_root

    def restore(self, dump_file: str | None = None, *, assume_yes: bool = False) -> RestoreResult:
        """Restore the database from a dump file.

        Args:
            dump_file: Dump to restore (default: the latest alias)
            assume_yes: Skip the confirmation prompt

        Returns:
            RestoreResult with the verified table count

        Raises:
            PreconditionMissing: dump, compose file or env file absent
            UserDeclined: the operator did not confirm the drop
            ExternalCommandFailed: drop/create or the restore itself failed
        """
        s = self._settings
        path = resolve_dump_file(self.project_root, s, dump_file)
        require_compose_environment(self.project_root, s)

        size_bytes = path.stat().st_size
        line_count = count_lines(path)

        self._console.print("\n[bold]== Database Restore ==[/bold]")
        self._console.info(f"Dump file: {dump_file or s.latest_link}")
        self._console.info(f"Environment: {s.env_file}")
        self._console.print("\n[bold]Dump file information:[/bold]")
        self._console.print(f"  Size: {size_bytes} bytes")
        self._console.print(f"  Lines: {line_count}")

        self._console.warn(f"This will DROP ALL DATA in the '{s.db_name}' database!")
        if not assume_yes and not self._console.confirm(
            "Are you sure you want to continue?"
        ):
            raise UserDeclined("Restore cancelled by user.")

        self._console.step(f"Step 1: Dropping and recreating database '{s.db_name}'...")
        self._recreate_database()
        self._console.ok(f"Database '{s.db_name}' dropped and recreated successfully.")

        self._console.step(f"Step 2: Restoring data from {path.name}...")
        result = self._commands.compose.psql_from_file(s.db_name, path)
        if not result.success:
            raise ExternalCommandFailed(
                "Failed to restore database from dump file!",
                details="The database may be in an inconsistent state.\n"
                + (result.output or ""),
            )
        self._console.ok(f"Database restored successfully from {path.name}")

        self._console.step("Step 3: Verifying restore...")
        table_count = self._count_tables()
        self._console.info(f"Tables found in restored database: {table_count}")
        if table_count > 0:
            self._console.ok(
                f"Restore verification successful - database contains {table_count} tables."
            )
        else:
            self._console.warn(
                "No tables found in restored database. This may indicate an issue."
            )

        self._console.print("\n[bold]Summary:[/bold]")
        self._console.print(f"  - Source: {path.name} ({size_bytes} bytes, {line_count} lines)")
        self._console.print(f"  - Target: {s.db_name} database")
        self._console.print(f"  - Tables: {table_count}")
        self._console.print(f"  - Completed: {datetime.now().ctime()}")

        return RestoreResult(
            dump_file=path,
            size_bytes=size_bytes,
            line_count=line_count,
            table_count=table_count,
        )

    def _recreate_database(self) -> None:
        s = self._settings
        compose = self._commands.compose

        self._console.info(f"Dropping database {s.db_name}...")
        dropped = compose.psql(s.maintenance_db, f'DROP DATABASE IF EXISTS "{s.db_name}";')
        if not dropped.success:
            raise ExternalCommandFailed(
                "Failed to drop database!", details=dropped.output or None
            )

        self._console.info(f"Creating database {s.db_name}...")
        created = compose.psql(s.maintenance_db, f'CREATE DATABASE "{s.db_name}";')
        if not created.success:
            raise ExternalCommandFailed(
                "Failed to create database!", details=created.output or None
            )

    def _count_tables(self) -> int:
        raw = self._commands.compose.psql_scalar(
            self._settings.db_name,
            "SELECT COUNT(*) FROM information_schema.tables WHERE table_schema = 'public';",
        )
        return parse_table_count(raw)
