"""Patch management for the vendored application checkout.

- extract: capture every working-tree change as one patch file
- selection: version menu helpers (HEAD sentinel plus newest tags)
- apply_build: revert, select version, apply patch, build images
"""

from .apply_build import (
    PatchApplyWorkflow,
    PatchMethod,
    VersionOutcome,
    WorkflowResult,
    WorkflowState,
)
from .extract import PatchExtractor, PatchExtractResult, require_repository
from .selection import (
    VersionCandidate,
    build_candidate_names,
    candidate_markers,
    resolve_selection,
)

__all__ = [
    "PatchApplyWorkflow",
    "PatchMethod",
    "VersionOutcome",
    "WorkflowResult",
    "WorkflowState",
    "PatchExtractor",
    "PatchExtractResult",
    "require_repository",
    "VersionCandidate",
    "build_candidate_names",
    "candidate_markers",
    "resolve_selection",
]
