"""pre-push: review the commits about to leave the repository."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from rich.console import Console

from commitguard.config import ReviewConfig
from commitguard.exceptions import ReviewError
from commitguard.git import GitRepository, PushUpdate, parse_push_updates
from commitguard.hooks.base import SKIPPABLE_ERRORS, Hook, most_severe
from commitguard.hooks.decision import Confirm, HookDecision, decide, tty_confirm
from commitguard.hooks.prompts import PRE_PUSH_SYSTEM_PROMPT, build_pre_push_prompt
from commitguard.review import PRE_PUSH_MARKERS, ReviewClient, ReviewOutcome
from commitguard.selection import FileClassifier, FileSelector, RevisionSource

__all__ = ["PrePushHook", "PushRange", "PROTECTED_BRANCHES"]

#: Branch names whose pushes need an explicit confirmation
PROTECTED_BRANCHES: frozenset[str] = frozenset(
    {"main", "master", "develop", "production", "prod"}
)


@dataclass(frozen=True, slots=True)
class PushRange:
    """Commits between ``base`` (exclusive) and ``head`` going to ``remote_ref``."""

    base: str
    head: str
    remote_ref: str

    @property
    def branch(self) -> str:
        return self.remote_ref.removeprefix("refs/heads/")


class PrePushHook(Hook):
    """Review pushed commits; git passes the remote name and URL as arguments
    and one line per updated ref on stdin."""

    name = "pre-push"
    system_prompt = PRE_PUSH_SYSTEM_PROMPT
    markers = PRE_PUSH_MARKERS

    def __init__(
        self,
        repo: GitRepository,
        config: ReviewConfig,
        client: ReviewClient,
        *,
        remote: str,
        environ: Mapping[str, str],
        stdin_text: str = "",
        confirm: Confirm = tty_confirm,
        console: Console | None = None,
    ) -> None:
        super().__init__(
            repo, config, client, environ=environ, confirm=confirm, console=console
        )
        self.remote = remote
        self.stdin_text = stdin_text

    def push_ranges(self) -> list[PushRange]:
        """Ranges to review, from the hook input or the current upstream."""
        updates = parse_push_updates(self.stdin_text)
        if not updates:
            upstream = self.repo.upstream()
            if upstream is None:
                self.log.info("no_upstream")
                return []
            branch = self.repo.current_branch() or "HEAD"
            return [PushRange(base=upstream, head="HEAD", remote_ref=f"refs/heads/{branch}")]

        ranges: list[PushRange] = []
        for update in updates:
            base = self._base_for(update)
            if base is not None:
                ranges.append(
                    PushRange(base=base, head=update.local_sha, remote_ref=update.remote_ref)
                )
        return ranges

    def _base_for(self, update: PushUpdate) -> str | None:
        if update.is_delete:
            self.log.info("ref_delete_skipped", ref=update.remote_ref)
            return None
        base = self.repo.push_base(update)
        if base is None:
            self.log.info("no_new_commits", ref=update.remote_ref)
        return base

    def _confirm_protected(self, ranges: list[PushRange]) -> HookDecision | None:
        for push_range in ranges:
            if push_range.branch not in PROTECTED_BRANCHES:
                continue
            answer = self.confirm(
                f"Pushing to protected branch {push_range.branch}. Continue?", False
            )
            if answer is False:
                return HookDecision.block(f"Push to {push_range.branch} cancelled")
            if answer is None:
                self.log.warning("protected_branch_push", branch=push_range.branch)
        return None

    async def _review_range(self, push_range: PushRange) -> ReviewOutcome | None:
        commits = self.repo.commits_between(push_range.base, push_range.head)
        if not commits:
            return None
        changed = self.repo.changed_files(push_range.base, push_range.head)
        source = RevisionSource(self.repo.repo, push_range.head)
        selection = FileSelector(FileClassifier(self.config, source)).select(changed)
        if selection.is_empty:
            self.log.info("no_reviewable_files", ref=push_range.remote_ref)
            return None

        diff = self.repo.diff(
            push_range.base, push_range.head, paths=selection.accepted_paths
        )
        prompt = build_pre_push_prompt(
            self.config,
            remote=self.remote,
            branch=push_range.branch,
            commits=commits,
            files=selection.accepted_paths,
            diff=diff,
        )
        self.log.info(
            "review_started",
            ref=push_range.remote_ref,
            commits=len(commits),
            files=len(selection.accepted),
        )
        return await self.review(prompt)

    async def run(self) -> HookDecision:
        if not self.enabled:
            self.log.info("hook_disabled")
            return HookDecision.allow("pre-push review disabled")

        ranges = self.push_ranges()
        if not ranges:
            return HookDecision.allow("Nothing to push")

        cancelled = self._confirm_protected(ranges)
        if cancelled is not None:
            return cancelled

        unavailable = self.check_available()
        if unavailable is not None:
            return self.skipped(unavailable)

        outcomes: list[ReviewOutcome] = []
        try:
            for push_range in ranges:
                outcome = await self._review_range(push_range)
                if outcome is not None:
                    outcomes.append(outcome)
        except ReviewError as e:
            if e.kind in SKIPPABLE_ERRORS:
                return self.skipped(e)
            self.log.warning("push_review_failed", kind=e.kind.value, error=e.message)
            return HookDecision.allow(f"Push review failed, basic checks only: {e.message}")

        if not outcomes:
            return HookDecision.allow("No reviewable changes in push")
        return decide(most_severe(outcomes), self.config, self.confirm)
