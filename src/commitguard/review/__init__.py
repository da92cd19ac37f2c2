"""External AI review: client, response cache, retry policy and verdicts."""

from __future__ import annotations

from commitguard.review.cache import ResponseCache, cache_key
from commitguard.review.client import ReviewClient, ReviewRequest, ensure_available
from commitguard.review.interpreter import (
    COMMIT_MSG_MARKERS,
    DEFAULT_MARKERS,
    PRE_COMMIT_MARKERS,
    PRE_PUSH_MARKERS,
    Marker,
    ReviewOutcome,
    interpret,
    markers_for,
)
from commitguard.review.retry import RetryPolicy

__all__ = [
    "COMMIT_MSG_MARKERS",
    "DEFAULT_MARKERS",
    "Marker",
    "PRE_COMMIT_MARKERS",
    "PRE_PUSH_MARKERS",
    "ResponseCache",
    "RetryPolicy",
    "ReviewClient",
    "ReviewOutcome",
    "ReviewRequest",
    "cache_key",
    "ensure_available",
    "interpret",
    "markers_for",
]
