"""File-selection pipeline: which changed files get reviewed."""

from __future__ import annotations

from commitguard.selection.classifier import FileClassifier, extension_of, looks_binary
from commitguard.selection.models import (
    CandidateFile,
    FileClassification,
    Rejection,
    RejectionReason,
    SelectionResult,
)
from commitguard.selection.selector import FileSelector
from commitguard.selection.sources import (
    ContentSource,
    IndexSource,
    RevisionSource,
    WorkingTreeSource,
)

__all__ = [
    "CandidateFile",
    "ContentSource",
    "FileClassification",
    "FileClassifier",
    "FileSelector",
    "IndexSource",
    "Rejection",
    "RejectionReason",
    "RevisionSource",
    "SelectionResult",
    "WorkingTreeSource",
    "extension_of",
    "looks_binary",
]
