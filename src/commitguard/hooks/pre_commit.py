"""pre-commit: review staged file contents."""

from __future__ import annotations

from commitguard.exceptions import ClassificationError, ReviewError
from commitguard.hooks.base import SKIPPABLE_ERRORS, Hook
from commitguard.hooks.decision import HookDecision, decide
from commitguard.hooks.prompts import PRE_COMMIT_SYSTEM_PROMPT, build_pre_commit_prompt
from commitguard.review import PRE_COMMIT_MARKERS
from commitguard.selection import FileClassifier, FileSelector, IndexSource

__all__ = ["PreCommitHook"]


class PreCommitHook(Hook):
    """Review the index before a commit is created.

    Files are selected and read from the index, so what gets reviewed is
    exactly what will be committed, not the working tree.
    """

    name = "pre-commit"
    system_prompt = PRE_COMMIT_SYSTEM_PROMPT
    markers = PRE_COMMIT_MARKERS

    async def run(self) -> HookDecision:
        if not self.enabled:
            self.log.info("hook_disabled")
            return HookDecision.allow("pre-commit review disabled")

        staged = self.repo.staged_files()
        if not staged:
            return HookDecision.allow("No staged files")

        source = IndexSource(self.repo.repo)
        selection = FileSelector(FileClassifier(self.config, source)).select(staged)
        for rejection in selection.rejected:
            self.log.debug("file_skipped", path=rejection.path, reason=rejection.reason.value)
        if selection.is_empty:
            return HookDecision.allow("No reviewable files staged")

        unavailable = self.check_available()
        if unavailable is not None:
            return self.skipped(unavailable)

        files: list[tuple[str, str]] = []
        for candidate in selection.accepted:
            try:
                files.append((candidate.path, source.read_text(candidate.path)))
            except ClassificationError as e:
                self.log.warning("file_unreadable", path=candidate.path, error=e.message)
        if not files:
            return HookDecision.allow("No reviewable files staged")

        self.log.info("review_started", files=len(files))
        try:
            outcome = await self.review(build_pre_commit_prompt(self.config, files))
        except ReviewError as e:
            if e.kind in SKIPPABLE_ERRORS:
                return self.skipped(e)
            return HookDecision.block(f"Code review failed: {e.message}")

        return decide(outcome, self.config, self.confirm)
