"""Operator settings loading.

Settings default to the layout of the self-hosted deployment (a compose
stack with a `db` service and the application checkout in `./twenty`).
An optional `twenty-ops.yaml` in the project directory overrides them:

    config:
      db_name: ${POSTGRES_DB:-default}
      repo_path: twenty
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from src.infra.constants import DEFAULT_CONSTANTS


class OpsSettings(BaseModel):
    """Settings for the backup, restore and patch workflows."""

    # Compose stack
    compose_file: str = "docker-compose.yml"
    env_file: str = ".env"
    db_service: str = "db"
    db_user: str = "twenty_user"
    db_name: str = "default"
    maintenance_db: str = "postgres"

    # Backups
    backup_dir: str = "db-backups-archive"
    latest_link: str = "db_backup_latest.sql"
    min_backup_lines: int = Field(default=10, ge=0)
    backup_preview_lines: int = Field(default=10, ge=0)

    # Vendored repository and patches
    repo_path: str = "twenty"
    default_patch_file: str = "patch-twenty-changes.patch"
    patch_preview_lines: int = Field(default=20, ge=0)
    mainline_branch: str = "main"
    remote: str = "origin"
    max_candidates: int = Field(default=12, ge=1)


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message
    """

    def replacer(match: re.Match[str]) -> str:
        var_expr = match.group(1)

        # Handle default values: ${VAR:-default}
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)

        # Handle error messages: ${VAR:?message}
        elif ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name}: {error_msg}")
            return value

        # Handle required variables: ${VAR}
        else:
            value = os.getenv(var_expr)
            if value is None:
                raise ValueError(f"Required environment variable {var_expr} not set")
            return value

    return re.sub(r"\$\{([^}]+)\}", replacer, text)


def load_settings(project_root: Path, file_path: Path | None = None) -> OpsSettings:
    """Load operator settings for a project directory.

    Args:
        project_root: Directory holding docker-compose.yml, .env and the repository
        file_path: Settings file (default: <project_root>/twenty-ops.yaml)

    Returns:
        OpsSettings with defaults for every key the file does not set

    Raises:
        ValueError: If the file is not valid YAML, lacks the 'config' key,
                   references a missing environment variable, or fails validation

    Side Effects:
        Loads <project_root>/.env into os.environ without overriding
        variables that are already set.
    """
    load_dotenv(project_root / ".env", override=False)

    settings_path = file_path or project_root / DEFAULT_CONSTANTS.SETTINGS_FILE
    if not settings_path.exists():
        logger.debug(f"No settings file at {settings_path}, using defaults")
        return OpsSettings()

    logger.info(f"Loading settings from {settings_path}")
    content = substitute_env_vars(settings_path.read_text())

    try:
        loaded: dict[str, Any] | None = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    if not loaded or "config" not in loaded:
        raise ValueError("Invalid YAML structure: missing 'config' key")

    try:
        settings = OpsSettings(**(loaded["config"] or {}))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    logger.debug(f"Settings overrides: {sorted((loaded['config'] or {}).keys())}")
    return settings
