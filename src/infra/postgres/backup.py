"""PostgreSQL backup functionality.

Dumps the application database through the compose `db` service into a
timestamped SQL file and points the latest alias at it.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from rich.markup import escape

from src.infra.config import OpsSettings
from src.infra.constants import DEFAULT_CONSTANTS
from src.infra.errors import ExternalCommandFailed, PreconditionMissing
from src.infra.postgres.environment import require_compose_environment
from src.infra.shell import ShellCommands
from src.utils.console_like import ConsoleLike, coalesce_console
from src.utils.paths import count_lines, read_head


@dataclass
class BackupResult:
    """Outcome of a successful backup."""

    path: Path
    size_bytes: int
    line_count: int
    created_at: datetime
    latest_link: Path | None


def backup_filename(prefix: str | None, timestamp: datetime) -> str:
    """Build `<prefix>_<YYYY-MM-DD_HH-MM-SS>.sql`.

    An empty prefix falls back to `db_backup`.
    """
    stamp = timestamp.strftime(DEFAULT_CONSTANTS.BACKUP_FILENAME_TIMESTAMP)
    name = prefix or DEFAULT_CONSTANTS.DEFAULT_BACKUP_PREFIX
    return f"{name}_{stamp}{DEFAULT_CONSTANTS.BACKUP_SUFFIX}"


class PostgresBackup:
    """Creates PostgreSQL database backups.

    The dump is plain SQL produced by pg_dump inside the database container.
    Backups are never rotated; the latest alias always points at the newest one.
    """

    def __init__(
        self,
        commands: ShellCommands,
        settings: OpsSettings,
        console: ConsoleLike | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._commands = commands
        self._settings = settings
        self._console = coalesce_console(console)
        self._clock = clock
        self.project_root = commands.project_root
        self.backup_dir = self.project_root / settings.backup_dir

    def create_backup(self, name_prefix: str | None = None) -> BackupResult:
        """Create a database backup.

        Args:
            name_prefix: Optional prefix replacing the default `db_backup`

        Returns:
            BackupResult describing the new dump file

        Raises:
            PreconditionMissing: compose file or env file absent
            ExternalCommandFailed: database unreachable or pg_dump failed
        """
        s = self._settings
        require_compose_environment(self.project_root, s)

        now = self._clock()
        filename = backup_filename(name_prefix, now)
        relative_path = Path(s.backup_dir) / filename
        backup_path = self.project_root / relative_path

        if not self.backup_dir.is_dir():
            self._console.info(f"Creating backup directory: {s.backup_dir}")
            self.backup_dir.mkdir(parents=True, exist_ok=True)

        self._console.print("\n[bold]== Database Backup ==[/bold]")
        self._console.info(f"Database: {s.db_name}")
        self._console.info(f"Backup file: {relative_path}")
        self._console.info(
            f"Timestamp: {now.strftime(DEFAULT_CONSTANTS.DISPLAY_TIMESTAMP)}"
        )
        self._console.info(f"Environment: {s.env_file}")

        self._check_database_exists()

        self._console.info("Creating database backup...")
        self._console.print(
            f"[dim]Running: pg_dump -U {s.db_user} {s.db_name} > {relative_path}[/dim]"
        )
        result = self._commands.compose.pg_dump(s.db_name, backup_path)
        if not result.success:
            if backup_path.exists():
                backup_path.unlink()
                self._console.info("Cleaned up partial backup file.")
            raise ExternalCommandFailed(
                "Failed to create database backup!", details=result.output or None
            )

        if not backup_path.is_file():
            raise PreconditionMissing("Backup file was not created!")

        size_bytes = backup_path.stat().st_size
        line_count = count_lines(backup_path)
        if line_count < s.min_backup_lines:
            self._console.warn(
                f"Backup file seems unusually small ({line_count} lines). "
                "Please verify the backup content manually."
            )

        self._console.ok("Database backup created successfully!")
        self._console.print("\n[bold]Backup Information:[/bold]")
        self._console.print(f"  File: {relative_path}")
        self._console.print(f"  Size: {size_bytes} bytes")
        self._console.print(f"  Lines: {line_count}")
        self._console.print(
            f"  Created: {now.strftime(DEFAULT_CONSTANTS.DISPLAY_TIMESTAMP)}"
        )
        self._show_preview(backup_path, line_count)

        latest_link = self._update_latest_link(relative_path)
        self._list_backups()

        return BackupResult(
            path=backup_path,
            size_bytes=size_bytes,
            line_count=line_count,
            created_at=now,
            latest_link=latest_link,
        )

    def _check_database_exists(self) -> None:
        s = self._settings
        self._console.info("Checking database connectivity...")
        exists = self._commands.compose.psql_scalar(
            s.maintenance_db,
            f"SELECT 1 FROM pg_database WHERE datname='{s.db_name}';",
        )
        if exists != "1":
            raise ExternalCommandFailed(
                f"Database '{s.db_name}' does not exist or is not accessible!",
                details=(
                    "Please ensure the database service is running and the "
                    f"'{s.db_name}' database exists."
                ),
            )
        self._console.ok(f"Database '{s.db_name}' is accessible.")

    def _show_preview(self, path: Path, line_count: int) -> None:
        preview_lines = self._settings.backup_preview_lines
        if preview_lines <= 0:
            return
        self._console.print(f"\n[bold]Preview (first {preview_lines} lines):[/bold]")
        for line in read_head(path, preview_lines):
            self._console.print(escape(line))
        if line_count > preview_lines:
            self._console.print(
                f"\n[dim]... (showing first {preview_lines} lines of {line_count} total lines)[/dim]"
            )

    def _update_latest_link(self, target: Path) -> Path | None:
        """Point the latest alias at the new backup.

        The link target is relative to the project directory, so the alias
        keeps working if the whole directory moves.
        """
        link = self.project_root / self._settings.latest_link

        if link.is_symlink():
            link.unlink()
            self._console.info(f"Removed existing symbolic link: {link.name}")
        elif link.exists():
            self._console.warn(
                f"{link.name} exists and is not a symbolic link; leaving it untouched."
            )
            return None

        try:
            link.symlink_to(target)
        except OSError as exc:
            self._console.warn(f"Failed to create symbolic link to latest backup: {exc}")
            return None

        self._console.ok(f"Created symbolic link: {link.name} -> {target}")
        return link

    def _list_backups(self) -> None:
        backups = sorted(self.backup_dir.glob(f"*{DEFAULT_CONSTANTS.BACKUP_SUFFIX}"))
        self._console.print(f"\n[bold]Existing backups in {self._settings.backup_dir}:[/bold]")
        if not backups:
            self._console.print("  No other backup files found.")
            return
        for path in backups:
            stat = path.stat()
            modified = datetime.fromtimestamp(stat.st_mtime).strftime(
                DEFAULT_CONSTANTS.DISPLAY_TIMESTAMP
            )
            self._console.print(f"  {path.name}  {stat.st_size} bytes  {modified}")


def create_backup(
    commands: ShellCommands,
    settings: OpsSettings,
    name_prefix: str | None = None,
    console: ConsoleLike | None = None,
) -> BackupResult:
    """Create a database backup.

    Args:
        commands: Shell commands bound to the project directory
        settings: Operator settings
        name_prefix: Optional file name prefix
        console: Output console (defaults to stdout)

    Returns:
        BackupResult describing the new dump file
    """
    backup = PostgresBackup(commands, settings, console=console)
    return backup.create_backup(name_prefix)
