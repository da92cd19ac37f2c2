"""Data models for the file-selection pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

__all__ = [
    "RejectionReason",
    "FileClassification",
    "CandidateFile",
    "Rejection",
    "SelectionResult",
]


class RejectionReason(str, Enum):
    """Why a changed path is left out of the review."""

    UNSUPPORTED_EXTENSION = "unsupported-extension"
    EXCLUDED_PATTERN = "excluded-pattern"
    TOO_LARGE = "too-large"
    BINARY = "binary"
    CAPPED = "capped"
    UNREADABLE = "unreadable"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class FileClassification:
    """Facts about one path at one snapshot.

    Attributes:
        path: Repository-relative path as given by git.
        extension: Lower-cased text after the last dot of the basename.
        size: Content size in bytes at the snapshot.
        is_binary: True when the head bytes look like binary data; None
            when the content is too large to have been inspected.
        matches_exclude: True when an exclude pattern matches the path.
    """

    path: str
    extension: str
    size: int
    is_binary: bool | None
    matches_exclude: bool


@dataclass(frozen=True, slots=True)
class CandidateFile:
    """A path that passed every content filter."""

    path: str
    extension: str
    size: int
    is_binary: bool = False


@dataclass(frozen=True, slots=True)
class Rejection:
    """A path left out of the review, with the first filter it failed."""

    path: str
    reason: RejectionReason

    def __str__(self) -> str:
        return f"{self.path}:{self.reason.value}"


@dataclass(frozen=True, slots=True)
class SelectionResult:
    """Outcome of narrowing a list of changed paths.

    Every de-duplicated input path appears exactly once, either in
    ``accepted`` (input order preserved) or in ``rejected``.

    Attributes:
        accepted: Files to review, at most ``max_files_per_commit`` of them.
        rejected: Rejected paths in input order, capped paths last.
    """

    accepted: tuple[CandidateFile, ...] = field(default_factory=tuple)
    rejected: tuple[Rejection, ...] = field(default_factory=tuple)

    @property
    def accepted_paths(self) -> list[str]:
        return [candidate.path for candidate in self.accepted]

    @property
    def is_empty(self) -> bool:
        """True when nothing is left to review."""
        return not self.accepted

    def reason_for(self, path: str) -> RejectionReason | None:
        """Return the rejection reason for ``path``, or None if accepted/unknown."""
        for rejection in self.rejected:
            if rejection.path == path:
                return rejection.reason
        return None

    def count_by_reason(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for rejection in self.rejected:
            key = rejection.reason.value
            counts[key] = counts.get(key, 0) + 1
        return counts
