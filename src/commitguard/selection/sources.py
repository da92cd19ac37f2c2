"""Readers for file content at a given snapshot.

A content source answers two questions for a repository-relative path: how
big is it, and what are its first bytes. The classifier never touches the
filesystem or git directly, so the same rules apply to the working tree, the
index (what pre-commit reviews) and a pushed revision (what pre-push reviews).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from git.exc import BadName, BadObject

from commitguard.exceptions import ClassificationError

if TYPE_CHECKING:
    from git import Repo

__all__ = [
    "ContentSource",
    "WorkingTreeSource",
    "IndexSource",
    "RevisionSource",
    "HEAD_BYTES",
]

#: Bytes inspected for binary detection
HEAD_BYTES: int = 1024


@runtime_checkable
class ContentSource(Protocol):
    """Size and head bytes of a path at one snapshot."""

    def size(self, path: str) -> int:
        """Content size in bytes.

        Raises:
            ClassificationError: If the path cannot be read.
        """
        ...

    def read_head(self, path: str, limit: int = HEAD_BYTES) -> bytes:
        """At most ``limit`` bytes from the start of the content.

        Raises:
            ClassificationError: If the path cannot be read.
        """
        ...

    def read_text(self, path: str) -> str:
        """Whole content decoded as UTF-8 (invalid bytes replaced).

        Raises:
            ClassificationError: If the path cannot be read.
        """
        ...


class WorkingTreeSource:
    """Content as it currently sits in the working tree."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def _path(self, path: str) -> Path:
        return self._root / path

    def size(self, path: str) -> int:
        try:
            return self._path(path).stat().st_size
        except OSError as e:
            raise ClassificationError(f"Cannot stat {path}: {e}", path=path) from e

    def read_head(self, path: str, limit: int = HEAD_BYTES) -> bytes:
        try:
            with open(self._path(path), "rb") as f:
                return f.read(limit)
        except OSError as e:
            raise ClassificationError(f"Cannot read {path}: {e}", path=path) from e

    def read_text(self, path: str) -> str:
        try:
            return self._path(path).read_bytes().decode("utf-8", errors="replace")
        except OSError as e:
            raise ClassificationError(f"Cannot read {path}: {e}", path=path) from e


class _GitObjectSource(ABC):
    """Shared blob access for index and revision snapshots."""

    def __init__(self, repo: Repo) -> None:
        self._repo = repo

    @abstractmethod
    def _binsha(self, path: str) -> bytes:
        """Blob id of ``path`` at this snapshot; KeyError when absent."""
        ...

    def _lookup(self, path: str) -> bytes:
        try:
            return self._binsha(path)
        except (KeyError, ValueError) as e:
            raise ClassificationError(
                f"{path} is not present at this snapshot", path=path
            ) from e

    def size(self, path: str) -> int:
        binsha = self._lookup(path)
        try:
            return int(self._repo.odb.info(binsha).size)
        except (OSError, ValueError, BadObject) as e:
            raise ClassificationError(f"Cannot read {path}: {e}", path=path) from e

    def read_head(self, path: str, limit: int = HEAD_BYTES) -> bytes:
        binsha = self._lookup(path)
        try:
            return bytes(self._repo.odb.stream(binsha).read(limit))
        except (OSError, ValueError, BadObject) as e:
            raise ClassificationError(f"Cannot read {path}: {e}", path=path) from e

    def read_text(self, path: str) -> str:
        binsha = self._lookup(path)
        try:
            data = self._repo.odb.stream(binsha).read()
        except (OSError, ValueError, BadObject) as e:
            raise ClassificationError(f"Cannot read {path}: {e}", path=path) from e
        return bytes(data).decode("utf-8", errors="replace")


class IndexSource(_GitObjectSource):
    """Staged content: the blob each path has in the git index (stage 0)."""

    def _binsha(self, path: str) -> bytes:
        return self._repo.index.entries[(path, 0)].binsha


class RevisionSource(_GitObjectSource):
    """Content of each path in the tree of commit ``rev``."""

    def __init__(self, repo: Repo, rev: str) -> None:
        super().__init__(repo)
        self._rev = rev
        try:
            self._tree = repo.commit(rev).tree
        except (ValueError, KeyError, BadName, BadObject) as e:
            raise ClassificationError(f"Unknown revision {rev}") from e

    @property
    def rev(self) -> str:
        return self._rev

    def _binsha(self, path: str) -> bytes:
        return self._tree[path].binsha
