"""commitguard exception hierarchy.

All exceptions can be imported from this package:
    from commitguard.exceptions import ConfigError, ReviewError, GitError
"""

from __future__ import annotations

from commitguard.exceptions.base import CommitGuardError
from commitguard.exceptions.config import ConfigError
from commitguard.exceptions.git import GitError, GitNotFoundError, NotARepositoryError
from commitguard.exceptions.review import CacheError, ReviewError, ReviewErrorKind
from commitguard.exceptions.runner import RunnerError, WorkingDirectoryError
from commitguard.exceptions.selection import ClassificationError

__all__ = [
    # Base
    "CommitGuardError",
    # Config
    "ConfigError",
    # Selection
    "ClassificationError",
    # Review
    "CacheError",
    "ReviewError",
    "ReviewErrorKind",
    # Git
    "GitError",
    "GitNotFoundError",
    "NotARepositoryError",
    # Runner
    "RunnerError",
    "WorkingDirectoryError",
]
