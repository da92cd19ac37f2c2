"""Content-addressed cache of review responses.

One JSON file per entry, named after the SHA-256 of the request. Entries are
written with atomicwrites, so a reader never sees a half-written file and
concurrent writers of the same key end with one complete entry.
"""

from __future__ import annotations

import hashlib
import json
import math
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from atomicwrites import atomic_write  # type: ignore[import-untyped]

from commitguard.exceptions import CacheError
from commitguard.logging import get_logger

__all__ = ["ResponseCache", "cache_key"]

logger = get_logger(__name__)

_SUFFIX = ".json"


def cache_key(prompt: str, system_prompt: str, model: str) -> str:
    """SHA-256 hex digest identifying a review request.

    The three parts are JSON-encoded as a list, so no choice of contents can
    make two different requests serialize to the same bytes.
    """
    payload = json.dumps([prompt, system_prompt, model], ensure_ascii=False)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class ResponseCache:
    """File-backed response cache with a time-to-live.

    Attributes:
        directory: Directory holding one ``<key>.json`` file per entry.
        ttl: Seconds an entry stays valid.
    """

    def __init__(
        self,
        directory: Path,
        ttl: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.directory = directory
        self.ttl = ttl
        self._clock = clock

    def _path_for(self, key: str) -> Path:
        return self.directory / f"{key}{_SUFFIX}"

    def _is_expired(self, created_at: float) -> bool:
        return self._clock() - created_at > self.ttl

    def _load(self, path: Path) -> dict[str, Any]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise CacheError(f"Cannot read cache entry {path.name}: {e}", path=path) from e
        if not isinstance(data, dict) or "response" not in data or "created_at" not in data:
            raise CacheError(f"Malformed cache entry {path.name}", path=path)
        try:
            created_at = float(data["created_at"])
            if not math.isfinite(created_at):
                raise ValueError("not finite")
        except (TypeError, ValueError) as e:
            raise CacheError(
                f"Bad timestamp in cache entry {path.name}: {data['created_at']!r}",
                path=path,
            ) from e
        data["created_at"] = created_at
        return data

    def get(self, key: str) -> str | None:
        """Return the cached response for ``key`` unless missing or expired.

        Raises:
            CacheError: If the entry exists but cannot be read or parsed.
        """
        path = self._path_for(key)
        if not path.is_file():
            return None
        data = self._load(path)
        if self._is_expired(data["created_at"]):
            logger.debug("cache_entry_expired", key=key)
            return None
        return str(data["response"])

    def put(self, key: str, response: str, model: str | None = None) -> None:
        """Store ``response`` under ``key``, replacing any previous entry.

        Raises:
            CacheError: If the entry cannot be written.
        """
        entry = {
            "key": key,
            "created_at": self._clock(),
            "model": model,
            "response": response,
        }
        path = self._path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with atomic_write(str(path), mode="w", encoding="utf-8", overwrite=True) as f:
                json.dump(entry, f, ensure_ascii=False)
        except OSError as e:
            raise CacheError(f"Cannot write cache entry {path.name}: {e}", path=path) from e

    def purge_expired(self) -> int:
        """Delete expired and unreadable entries.

        Returns:
            Number of files removed.
        """
        removed = 0
        for path in self._entries():
            try:
                expired = self._is_expired(self._load(path)["created_at"])
            except CacheError:
                expired = True
            if expired and self._unlink(path):
                removed += 1
        logger.info("cache_purged", removed=removed, directory=str(self.directory))
        return removed

    def clear(self) -> int:
        """Delete every entry.

        Returns:
            Number of files removed.
        """
        removed = sum(1 for path in self._entries() if self._unlink(path))
        logger.info("cache_cleared", removed=removed, directory=str(self.directory))
        return removed

    def _entries(self) -> list[Path]:
        if not self.directory.is_dir():
            return []
        return sorted(self.directory.glob(f"*{_SUFFIX}"))

    def _unlink(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise CacheError(f"Cannot remove cache entry {path.name}: {e}", path=path) from e
        return True
