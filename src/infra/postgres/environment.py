"""Precondition checks shared by the database workflows."""

from pathlib import Path

from src.infra.config import OpsSettings
from src.infra.errors import PreconditionMissing


def require_compose_environment(project_root: Path, settings: OpsSettings) -> None:
    """Ensure the compose file and environment file exist.

    Their contents are opaque here; docker compose reads them.

    Raises:
        PreconditionMissing: If either file is absent
    """
    compose_file = project_root / settings.compose_file
    if not compose_file.is_file():
        raise PreconditionMissing(
            f"{settings.compose_file} not found in {project_root}!",
            details=f"Please run this command from the directory containing {settings.compose_file}.",
        )

    env_file = project_root / settings.env_file
    if not env_file.is_file():
        raise PreconditionMissing(
            f"Environment file '{settings.env_file}' not found!",
            details=f"Please ensure the {settings.env_file} file exists in {project_root}.",
        )
