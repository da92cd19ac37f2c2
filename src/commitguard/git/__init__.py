"""Git access for commitguard hooks."""

from __future__ import annotations

from commitguard.git.repository import (
    EMPTY_TREE_SHA,
    ZERO_SHA,
    CommitInfo,
    GitRepository,
    PushUpdate,
    parse_push_updates,
)

__all__ = [
    "EMPTY_TREE_SHA",
    "ZERO_SHA",
    "CommitInfo",
    "GitRepository",
    "PushUpdate",
    "parse_push_updates",
]
