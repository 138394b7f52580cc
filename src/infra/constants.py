"""Fixed constants for the operator tools.

This module centralizes the magic strings that are not meant to be
configured: menu markers, the version sentinel and timestamp formats.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class OpsConstants:
    """Constants shared by the backup, restore and patch workflows.

    All attributes are class-level and immutable.
    """

    # Synthetic first entry of the version menu: keep the working tree as-is
    HEAD_SENTINEL: str = "HEAD"

    # Version menu markers
    MARKER_CURRENT_HEAD: str = "🔄 CURRENT HEAD"
    MARKER_CURRENT_TAG: str = "📍 CURRENT"
    MARKER_NEWEST_TAG: str = "🚀 NEWEST"
    UNKNOWN_DATE: str = "unknown date"

    # Timestamp formats
    BACKUP_FILENAME_TIMESTAMP: str = "%Y-%m-%d_%H-%M-%S"
    DISPLAY_TIMESTAMP: str = "%Y-%m-%d %H:%M:%S"
    HEAD_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S %z"

    # Default backup name when no prefix is given
    DEFAULT_BACKUP_PREFIX: str = "db_backup"
    BACKUP_SUFFIX: str = ".sql"

    # Optional settings file in the project directory
    SETTINGS_FILE: str = "twenty-ops.yaml"
    PROJECT_DIR_ENV: str = "TWENTY_OPS_PROJECT_DIR"


DEFAULT_CONSTANTS = OpsConstants()
