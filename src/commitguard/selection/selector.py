"""Narrow a list of changed paths to the files worth reviewing."""

from __future__ import annotations

from collections.abc import Iterable

from commitguard.exceptions import ClassificationError
from commitguard.logging import get_logger
from commitguard.selection.classifier import (
    KNOWN_BINARY_EXTENSIONS,
    FileClassifier,
    extension_of,
)
from commitguard.selection.models import (
    CandidateFile,
    Rejection,
    RejectionReason,
    SelectionResult,
)

__all__ = ["FileSelector"]

logger = get_logger(__name__)


class FileSelector:
    """Apply the selection filters in order and enforce the per-run cap.

    Filters, first failure wins:

    1. extension not in the allow-list (``binary`` for well-known binary
       formats, ``unsupported-extension`` otherwise)
    2. exclude pattern match
    3. content unreadable at the snapshot
    4. larger than ``max_file_size``
    5. binary content

    Files passing every filter are accepted in input order until
    ``max_files_per_commit`` is reached; the rest are rejected as ``capped``.
    """

    def __init__(self, classifier: FileClassifier) -> None:
        self._classifier = classifier
        self._config = classifier.config

    def _evaluate(
        self, path: str
    ) -> tuple[RejectionReason | None, CandidateFile | None]:
        classifier = self._classifier

        if not classifier.is_allowed_extension(path):
            if extension_of(path) in KNOWN_BINARY_EXTENSIONS:
                return RejectionReason.BINARY, None
            return RejectionReason.UNSUPPORTED_EXTENSION, None

        if classifier.matches_exclude(path):
            return RejectionReason.EXCLUDED_PATTERN, None

        try:
            info = classifier.classify(path)
        except ClassificationError as e:
            logger.warning("file_unreadable", path=path, error=e.message)
            return RejectionReason.UNREADABLE, None

        if info.size > self._config.max_file_size:
            return RejectionReason.TOO_LARGE, None
        if info.is_binary:
            return RejectionReason.BINARY, None

        return None, CandidateFile(
            path=path, extension=info.extension, size=info.size, is_binary=False
        )

    def select(self, paths: Iterable[str]) -> SelectionResult:
        """Select the files to review from ``paths``.

        Args:
            paths: Changed paths, repository-relative. Duplicates keep their
                first occurrence; empty entries are dropped.

        Returns:
            SelectionResult partitioning the de-duplicated input.
        """
        seen: set[str] = set()
        eligible: list[CandidateFile] = []
        rejected: list[Rejection] = []

        for path in paths:
            if not path or path in seen:
                continue
            seen.add(path)
            reason, candidate = self._evaluate(path)
            if candidate is not None:
                eligible.append(candidate)
            elif reason is not None:
                rejected.append(Rejection(path=path, reason=reason))

        cap = self._config.max_files_per_commit
        accepted = eligible[:cap]
        for candidate in eligible[cap:]:
            rejected.append(Rejection(path=candidate.path, reason=RejectionReason.CAPPED))

        result = SelectionResult(accepted=tuple(accepted), rejected=tuple(rejected))
        logger.info(
            "files_selected",
            accepted=len(result.accepted),
            rejected=len(result.rejected),
            reasons=result.count_by_reason(),
        )
        return result
