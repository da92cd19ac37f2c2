from __future__ import annotations

from commitguard.exceptions.base import CommitGuardError


class ClassificationError(CommitGuardError):
    """Exception raised when a candidate file cannot be read at its snapshot.

    The selector turns this into an ``unreadable`` rejection and moves on to
    the next path.

    Attributes:
        message: Human-readable error message.
        path: Repository-relative path that could not be read.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        """Initialize the ClassificationError.

        Args:
            message: Human-readable error message.
            path: Path that could not be read.
        """
        self.path = path
        super().__init__(message)
