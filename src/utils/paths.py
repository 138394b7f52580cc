import os
from pathlib import Path

from src.infra.constants import DEFAULT_CONSTANTS


def get_project_root(project_dir: Path | None = None) -> Path:
    """Get the deployment project directory.

    This is the directory holding docker-compose.yml, .env and the vendored
    repository, not the directory this package is installed in.

    Args:
        project_dir: Explicit directory, e.g. from --project-dir

    Returns:
        Absolute project directory: the explicit one, else
        $TWENTY_OPS_PROJECT_DIR, else the current working directory
    """
    if project_dir is not None:
        return project_dir.expanduser().resolve()

    from_env = os.getenv(DEFAULT_CONSTANTS.PROJECT_DIR_ENV)
    if from_env:
        return Path(from_env).expanduser().resolve()

    return Path.cwd()


def count_lines(path: Path) -> int:
    """Count newline characters, like `wc -l`."""
    count = 0
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            count += chunk.count(b"\n")
    return count


def read_head(path: Path, lines: int) -> list[str]:
    """Return the first lines of a text file without trailing newlines."""
    head: list[str] = []
    if lines <= 0:
        return head
    with open(path, encoding="utf-8", errors="replace") as f:
        for line in f:
            head.append(line.rstrip("\n"))
            if len(head) >= lines:
                break
    return head
