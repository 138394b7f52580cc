"""Database backup and restore commands.

Commands:
    backup  - Dump the application database to a timestamped file
    restore - Drop, recreate and reload the database from a dump
"""

from typing import Annotated

import typer

from src.cli.context import get_cli_context
from src.cli.shared.console import with_error_handling
from src.infra.postgres import PostgresBackup, PostgresRestore


@with_error_handling
def backup(
    ctx: typer.Context,
    name_prefix: Annotated[
        str | None,
        typer.Argument(
            help="Optional prefix for the backup file name (default: db_backup)",
            show_default=False,
        ),
    ] = None,
) -> None:
    """💾 Create a timestamped database backup.

    Dumps the database through the compose `db` service into
    db-backups-archive/ and points db_backup_latest.sql at the new file.

    Examples:
        # db-backups-archive/db_backup_YYYY-MM-DD_HH-MM-SS.sql
        twenty-ops backup

        # db-backups-archive/before-migration_YYYY-MM-DD_HH-MM-SS.sql
        twenty-ops backup before-migration
    """
    cli = get_cli_context(ctx)
    cli.console.print_header("Database Backup Process")

    result = PostgresBackup(cli.commands, cli.settings, console=cli.console).create_backup(
        name_prefix
    )

    relative = result.path.relative_to(cli.project_root)
    cli.console.ok("🎉 Database backup completed successfully!")
    cli.console.print("\nTo restore from this backup:")
    cli.console.print(f"  twenty-ops restore {relative}")
    if result.latest_link is not None:
        cli.console.print("\nTo restore from the latest backup:")
        cli.console.print(f"  twenty-ops restore {result.latest_link.name}")


@with_error_handling
def restore(
    ctx: typer.Context,
    dump_file: Annotated[
        str | None,
        typer.Argument(
            help="SQL dump file to restore (default: db_backup_latest.sql)",
            show_default=False,
        ),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip the confirmation prompt"),
    ] = False,
) -> None:
    """♻️  Restore the database from a SQL dump.

    [bold red]Destructive:[/bold red] drops and recreates the database before
    loading the dump. There is no rollback if loading fails.

    Examples:
        # Restore from db_backup_latest.sql
        twenty-ops restore

        # Restore from a specific dump
        twenty-ops restore db-backups-archive/before-migration_2024-01-01_00-00-00.sql
    """
    cli = get_cli_context(ctx)
    cli.console.print_header("Database Restore Process")

    PostgresRestore(cli.commands, cli.settings, console=cli.console).restore(
        dump_file, assume_yes=yes
    )

    s = cli.settings
    cli.console.ok("🎉 Database restore completed successfully!")
    cli.console.print("\nTo create a new dump from the current database:")
    cli.console.print("  twenty-ops backup")
    cli.console.print(
        f"  [dim]or: docker compose --env-file {s.env_file} exec -T {s.db_service} "
        f"pg_dump -U {s.db_user} {s.db_name} > new_dump.sql[/dim]"
    )
