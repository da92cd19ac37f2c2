from __future__ import annotations

from enum import Enum
from pathlib import Path

from commitguard.exceptions.base import CommitGuardError


class ReviewErrorKind(str, Enum):
    """Failure categories for an external review invocation."""

    TIMEOUT = "timeout"
    EXTERNAL_FAILURE = "external_failure"
    UNAUTHORIZED = "unauthorized"
    CLIENT_UNAVAILABLE = "client_unavailable"

    @property
    def retryable(self) -> bool:
        """Whether a failure of this kind is worth another attempt."""
        return self in (ReviewErrorKind.TIMEOUT, ReviewErrorKind.EXTERNAL_FAILURE)


class ReviewError(CommitGuardError):
    """Exception raised when the external review tool cannot produce a response.

    ``TIMEOUT`` and ``EXTERNAL_FAILURE`` are retried by the review client;
    ``UNAUTHORIZED`` and ``CLIENT_UNAVAILABLE`` short-circuit so the hook can
    degrade to its cheap checks.

    Attributes:
        message: Human-readable error message.
        kind: Failure category.
        exit_code: Exit code of the last external process (if any).
        stderr: Standard error of the last external process (if any).
    """

    def __init__(
        self,
        message: str,
        kind: ReviewErrorKind,
        exit_code: int | None = None,
        stderr: str | None = None,
    ) -> None:
        """Initialize the ReviewError.

        Args:
            message: Human-readable error message.
            kind: Failure category.
            exit_code: Exit code of the external process.
            stderr: Standard error output of the external process.
        """
        self.kind = kind
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        """True if the review client should try again."""
        return self.kind.retryable


class CacheError(CommitGuardError):
    """Exception raised when a cached response cannot be read or written.

    The review client logs and swallows it; a cache failure never fails a
    review.

    Attributes:
        message: Human-readable error message.
        path: Cache file involved (if known).
    """

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        """Initialize the CacheError.

        Args:
            message: Human-readable error message.
            path: Cache file involved.
        """
        self.path = path
        super().__init__(message)
