"""PostgreSQL database management infrastructure.

Backup and restore of the application database. Everything runs through
psql and pg_dump inside the compose `db` service; nothing here talks to
Postgres directly.
"""

from .backup import BackupResult, PostgresBackup, backup_filename, create_backup
from .environment import require_compose_environment
from .restore import PostgresRestore, RestoreResult, parse_table_count, resolve_dump_file

__all__ = [
    "BackupResult",
    "PostgresBackup",
    "backup_filename",
    "create_backup",
    "require_compose_environment",
    "PostgresRestore",
    "RestoreResult",
    "parse_table_count",
    "resolve_dump_file",
]
