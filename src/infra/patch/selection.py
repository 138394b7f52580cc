"""Version selection for the patch-apply workflow.

The menu always starts with the HEAD sentinel ("keep the working tree as
it is"), followed by the most recently created tags, newest first.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.infra.constants import DEFAULT_CONSTANTS


@dataclass
class VersionCandidate:
    """One row of the version menu."""

    name: str
    date: str
    markers: list[str] = field(default_factory=list)

    @property
    def is_sentinel(self) -> bool:
        return self.name == DEFAULT_CONSTANTS.HEAD_SENTINEL


def build_candidate_names(tags: list[str], max_candidates: int) -> list[str]:
    """Prefix the sentinel to the newest tags, capped at max_candidates entries."""
    return [DEFAULT_CONSTANTS.HEAD_SENTINEL, *tags[: max(max_candidates - 1, 0)]]


def candidate_markers(name: str, index: int, current_tag: str | None) -> list[str]:
    """Markers for the candidate at a 0-based menu position.

    Position 1 (the first tag after the sentinel) is always flagged as the
    newest tag, in addition to being flagged current when HEAD sits on it.
    """
    if name == DEFAULT_CONSTANTS.HEAD_SENTINEL:
        return [DEFAULT_CONSTANTS.MARKER_CURRENT_HEAD]

    markers = []
    if current_tag is not None and name == current_tag:
        markers.append(DEFAULT_CONSTANTS.MARKER_CURRENT_TAG)
    if index == 1:
        markers.append(DEFAULT_CONSTANTS.MARKER_NEWEST_TAG)
    return markers


def resolve_selection(raw: str, count: int) -> tuple[int, bool]:
    """Turn the operator's answer into a 0-based candidate index.

    Empty input selects the sentinel. Non-numeric or out-of-range input
    also selects the sentinel instead of being rejected.

    Returns:
        (index, valid) where valid is False when the input had to be coerced
    """
    answer = raw.strip()
    if not answer:
        return 0, True
    if not (answer.isascii() and answer.isdigit()):
        return 0, False
    choice = int(answer)
    if choice < 1 or choice > count:
        return 0, False
    return choice - 1, True
