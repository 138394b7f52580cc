"""CLI command modules.

Commands:
- backup / restore: database dumps through the compose `db` service
- patch-extract / patch-apply-and-build: patches for the vendored checkout
"""

from .database import backup, restore
from .patch import patch_apply_and_build, patch_extract

__all__ = [
    "backup",
    "restore",
    "patch_extract",
    "patch_apply_and_build",
]
