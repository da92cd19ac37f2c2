"""GitPython-based repository access for the hooks.

Only read operations are needed: staged paths and diffs for pre-commit, the
pushed range for pre-push, and commit summaries for the pre-push prompt.

Example:
    ```python
    from commitguard.git import GitRepository

    repo = GitRepository()
    paths = repo.staged_files()
    diff = repo.diff(staged=True)
    ```
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo
from git.exc import GitCommandNotFound

from commitguard.exceptions import GitError, GitNotFoundError, NotARepositoryError
from commitguard.logging import get_logger

logger = get_logger(__name__)

__all__ = [
    "CommitInfo",
    "GitRepository",
    "PushUpdate",
    "parse_push_updates",
    "EMPTY_TREE_SHA",
    "ZERO_SHA",
]

#: Object name git uses for "no commit" in hook input
ZERO_SHA: str = "0" * 40

#: Hash of the empty tree, a valid diff base for root commits
EMPTY_TREE_SHA: str = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"

_SHA = re.compile(r"^[0-9a-f]{40}$")


# =============================================================================
# Value Objects (Return Types)
# =============================================================================


@dataclass(frozen=True, slots=True)
class CommitInfo:
    """Single commit metadata.

    Attributes:
        sha: Full 40-character SHA.
        short_sha: Abbreviated SHA (7 chars).
        message: First line of commit message.
        author: Author name.
    """

    sha: str
    short_sha: str
    message: str
    author: str


@dataclass(frozen=True, slots=True)
class PushUpdate:
    """One ``<local ref> <local sha> <remote ref> <remote sha>`` line.

    Attributes:
        local_ref: Ref being pushed (e.g. ``refs/heads/main``).
        local_sha: Commit being pushed; ZERO_SHA for a delete.
        remote_ref: Ref being updated on the remote.
        remote_sha: Current remote commit; ZERO_SHA for a new ref.
    """

    local_ref: str
    local_sha: str
    remote_ref: str
    remote_sha: str

    @property
    def is_delete(self) -> bool:
        return self.local_sha == ZERO_SHA

    @property
    def is_new_ref(self) -> bool:
        return self.remote_sha == ZERO_SHA


def parse_push_updates(text: str) -> list[PushUpdate]:
    """Parse the ref lines git feeds a pre-push hook on stdin.

    Malformed lines are skipped with a warning.
    """
    updates: list[PushUpdate] = []
    for line in text.splitlines():
        parts = line.split()
        if not parts:
            continue
        if len(parts) != 4 or not (_SHA.match(parts[1]) and _SHA.match(parts[3])):
            logger.warning("push_line_ignored", line=line)
            continue
        updates.append(PushUpdate(*parts))
    return updates


def _convert_git_error(exc: GitCommandError, operation: str) -> GitError:
    """Convert GitPython exception to a commitguard exception."""
    stderr = str(exc.stderr or exc.stdout or str(exc)).strip()
    return GitError(f"git {operation} failed: {stderr}", operation=operation)


def _split_lines(output: str) -> list[str]:
    return [line.strip() for line in output.split("\n") if line.strip()]


def _split_paths(output: str) -> list[str]:
    """Paths from ``-z`` output; NUL-separated and never quoted."""
    return [path for path in output.split("\0") if path]


# =============================================================================
# Main Class: GitRepository
# =============================================================================


class GitRepository:
    """Read-only GitPython repository operations used by the hooks."""

    def __init__(self, path: Path | str | None = None) -> None:
        """Initialize GitRepository.

        Args:
            path: Any directory inside the repository. Defaults to the
                current directory.

        Raises:
            GitNotFoundError: If git is not installed.
            NotARepositoryError: If path is not inside a git repository.
        """
        resolved_path = Path.cwd() if path is None else Path(path)

        try:
            self._repo = Repo(resolved_path, search_parent_directories=True)
        except GitCommandNotFound as e:
            raise GitNotFoundError("Git CLI not found. Please install git.") from e
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise NotARepositoryError(
                f"Not a git repository: {resolved_path}",
                path=resolved_path,
            ) from e

        if self._repo.working_tree_dir is None:
            raise NotARepositoryError(
                f"Bare repositories have no working tree: {resolved_path}",
                path=resolved_path,
            )

    @property
    def repo(self) -> Repo:
        """Underlying GitPython Repo instance."""
        return self._repo

    def get_repo_root(self) -> Path:
        """Get repository root directory."""
        return Path(str(self._repo.working_tree_dir))

    def _git(self, operation: str, *args: str) -> str:
        try:
            return str(getattr(self._repo.git, operation)(*args))
        except GitCommandError as e:
            raise _convert_git_error(e, operation) from e

    # -------------------------------------------------------------------------
    # Repository State
    # -------------------------------------------------------------------------

    def current_branch(self) -> str | None:
        """Current branch name, or None when HEAD is detached."""
        try:
            return self._repo.active_branch.name
        except TypeError:
            return None

    def upstream(self) -> str | None:
        """Upstream of the current branch (e.g. ``origin/main``), if any."""
        try:
            output = self._repo.git.rev_parse(
                "--abbrev-ref", "--symbolic-full-name", "@{upstream}"
            )
        except GitCommandError:
            return None
        return str(output).strip() or None

    def has_commits(self) -> bool:
        try:
            self._repo.head.commit
        except ValueError:
            return False
        return True

    # -------------------------------------------------------------------------
    # Staged Changes
    # -------------------------------------------------------------------------

    def staged_files(self) -> list[str]:
        """Paths added, copied or modified in the index.

        Deleted files are left out; there is nothing of theirs to review.
        """
        return _split_paths(
            self._git("diff", "-z", "--cached", "--name-only", "--diff-filter=ACM")
        )

    def diff(
        self,
        base: str | None = None,
        head: str | None = None,
        staged: bool = False,
        paths: list[str] | None = None,
    ) -> str:
        """Get diff output.

        Args:
            base: Base revision (ignored when ``staged``).
            head: Head revision; working tree when None.
            staged: Diff the index against HEAD.
            paths: Limit the diff to these paths.

        Returns:
            Unified diff text.
        """
        args: list[str] = []
        if staged:
            args.append("--cached")
        else:
            if base:
                args.append(base)
            if head:
                args.append(head)
        if paths:
            args.append("--")
            args.extend(paths)
        return self._git("diff", *args)

    # -------------------------------------------------------------------------
    # Push Ranges
    # -------------------------------------------------------------------------

    def push_base(self, update: PushUpdate) -> str | None:
        """Revision the pushed commits should be compared against.

        For an existing remote ref this is the remote's commit. For a new ref
        it is the parent of the oldest commit not yet on any remote, or the
        empty tree when that commit is a root. None means nothing is new.
        """
        if update.is_delete:
            return None
        if not update.is_new_ref:
            return update.remote_sha

        new_commits = _split_lines(
            self._git("rev_list", update.local_sha, "--not", "--remotes")
        )
        if not new_commits:
            return None
        oldest = self._repo.commit(new_commits[-1])
        if oldest.parents:
            return oldest.parents[0].hexsha
        return EMPTY_TREE_SHA

    def changed_files(self, base: str, head: str) -> list[str]:
        """Paths added, copied or modified between two revisions."""
        return _split_paths(
            self._git("diff", "-z", "--name-only", "--diff-filter=ACM", base, head)
        )

    def commits_between(self, base: str, head: str, limit: int = 50) -> list[CommitInfo]:
        """Commits reachable from ``head`` but not from ``base``, newest first."""
        if base == EMPTY_TREE_SHA:
            commits = self._repo.iter_commits(head, max_count=limit)
        else:
            commits = self._repo.iter_commits(f"{base}..{head}", max_count=limit)

        result: list[CommitInfo] = []
        try:
            for commit in commits:
                msg = commit.message
                if isinstance(msg, bytes):
                    msg = msg.decode("utf-8", errors="replace")
                result.append(
                    CommitInfo(
                        sha=commit.hexsha,
                        short_sha=commit.hexsha[:7],
                        message=msg.split("\n")[0],
                        author=commit.author.name or "Unknown",
                    )
                )
        except GitCommandError as e:
            raise _convert_git_error(e, "log") from e
        return result

    def commit_count(self, base: str, head: str) -> int:
        if base == EMPTY_TREE_SHA:
            return int(self._git("rev_list", "--count", head).strip() or 0)
        return int(self._git("rev_list", "--count", f"{base}..{head}").strip() or 0)
