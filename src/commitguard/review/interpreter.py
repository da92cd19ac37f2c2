"""Turn review response text into a verdict.

Each hook has an ordered table of (marker, outcome) pairs. Every marker found
in the response counts and the most severe outcome wins; a response without
any marker is ``INDETERMINATE``, never a pass.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from commitguard.constants import HookName

__all__ = [
    "ReviewOutcome",
    "Marker",
    "PRE_COMMIT_MARKERS",
    "COMMIT_MSG_MARKERS",
    "PRE_PUSH_MARKERS",
    "DEFAULT_MARKERS",
    "markers_for",
    "find_markers",
    "interpret",
]


class ReviewOutcome(str, Enum):
    """Verdict vocabulary shared by all hooks."""

    READY_TO_PROCEED = "ReadyToProceed"
    PROCEED_WITH_WARNINGS = "ProceedWithWarnings"
    SHOULD_DELAY = "ShouldDelay"
    BLOCKED = "Blocked"
    INDETERMINATE = "Indeterminate"

    @property
    def severity(self) -> int:
        """Rank used to pick the winning marker; higher is more severe."""
        return _SEVERITY[self]


_SEVERITY: dict[ReviewOutcome, int] = {
    ReviewOutcome.INDETERMINATE: -1,
    ReviewOutcome.READY_TO_PROCEED: 0,
    ReviewOutcome.PROCEED_WITH_WARNINGS: 1,
    ReviewOutcome.SHOULD_DELAY: 2,
    ReviewOutcome.BLOCKED: 3,
}


@dataclass(frozen=True, slots=True)
class Marker:
    """A case-sensitive regular expression and the outcome it signals."""

    pattern: str
    outcome: ReviewOutcome

    def search(self, text: str) -> bool:
        return re.search(self.pattern, text) is not None


PRE_COMMIT_MARKERS: tuple[Marker, ...] = (
    Marker(r"ERROR\b.*\b(CRITICAL|HIGH)\b", ReviewOutcome.BLOCKED),
    Marker(r"\bERROR\b", ReviewOutcome.PROCEED_WITH_WARNINGS),
    Marker(r"\bWARNING\b", ReviewOutcome.PROCEED_WITH_WARNINGS),
    Marker(r"\bPASS\b", ReviewOutcome.READY_TO_PROCEED),
)

COMMIT_MSG_MARKERS: tuple[Marker, ...] = (
    Marker(r"\bREJECT\b", ReviewOutcome.BLOCKED),
    Marker(r"\bNEEDS_IMPROVEMENT\b", ReviewOutcome.PROCEED_WITH_WARNINGS),
    Marker(r"\bPASS\b", ReviewOutcome.READY_TO_PROCEED),
)

PRE_PUSH_MARKERS: tuple[Marker, ...] = (
    Marker(r"\bBLOCK_PUSH\b", ReviewOutcome.BLOCKED),
    Marker(r"\bDELAY_PUSH\b", ReviewOutcome.SHOULD_DELAY),
    Marker(r"\bPUSH_WITH_ATTENTION\b", ReviewOutcome.PROCEED_WITH_WARNINGS),
    Marker(r"\bPUSH_READY\b", ReviewOutcome.READY_TO_PROCEED),
)

DEFAULT_MARKERS: tuple[Marker, ...] = (
    *PRE_PUSH_MARKERS,
    Marker(r"\bREJECT\b", ReviewOutcome.BLOCKED),
    Marker(r"\bBLOCK(ED)?\b", ReviewOutcome.BLOCKED),
    Marker(r"\bDELAY\b", ReviewOutcome.SHOULD_DELAY),
    Marker(r"\bNEEDS_IMPROVEMENT\b", ReviewOutcome.PROCEED_WITH_WARNINGS),
    Marker(r"\bWARN(ING)?\b", ReviewOutcome.PROCEED_WITH_WARNINGS),
    Marker(r"\bPASS\b", ReviewOutcome.READY_TO_PROCEED),
)

_MARKERS_BY_HOOK: dict[str, tuple[Marker, ...]] = {
    "pre-commit": PRE_COMMIT_MARKERS,
    "commit-msg": COMMIT_MSG_MARKERS,
    "pre-push": PRE_PUSH_MARKERS,
}


def markers_for(hook: HookName | None) -> tuple[Marker, ...]:
    """Marker table for ``hook``; the combined table when hook is None."""
    if hook is None:
        return DEFAULT_MARKERS
    return _MARKERS_BY_HOOK.get(hook, DEFAULT_MARKERS)


def find_markers(text: str, markers: tuple[Marker, ...]) -> list[Marker]:
    """All markers present in ``text``, in table order."""
    return [marker for marker in markers if marker.search(text)]


def interpret(text: str, markers: tuple[Marker, ...] = DEFAULT_MARKERS) -> ReviewOutcome:
    """Most severe outcome among the markers found in ``text``.

    Example:
        >>> interpret("✅ PUSH_READY ... 🚫 BLOCK_PUSH", PRE_PUSH_MARKERS)
        <ReviewOutcome.BLOCKED: 'Blocked'>
        >>> interpret("Looks fine to me")
        <ReviewOutcome.INDETERMINATE: 'Indeterminate'>
    """
    found = find_markers(text, markers)
    if not found:
        return ReviewOutcome.INDETERMINATE
    return max((marker.outcome for marker in found), key=lambda outcome: outcome.severity)
