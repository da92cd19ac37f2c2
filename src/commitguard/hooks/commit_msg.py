"""commit-msg: basic message checks followed by an AI evaluation."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console

from commitguard.config import ReviewConfig
from commitguard.exceptions import ReviewError
from commitguard.git import GitRepository
from commitguard.hooks.base import Hook, most_severe
from commitguard.hooks.decision import Confirm, HookDecision, decide, tty_confirm
from commitguard.hooks.prompts import COMMIT_MSG_SYSTEM_PROMPT, build_commit_msg_prompt
from commitguard.review import COMMIT_MSG_MARKERS, ReviewClient, ReviewOutcome

__all__ = ["CommitMsgHook", "MessageCheck", "check_message", "clean_message"]

#: Messages git generates or rewrites itself; never reviewed
_SPECIAL_PREFIXES = re.compile(r"^(Merge|Revert|fixup!|squash!)")


@dataclass(frozen=True, slots=True)
class MessageCheck:
    """Result of the cheap, local commit message checks."""

    outcome: ReviewOutcome
    problems: tuple[str, ...] = ()


def clean_message(raw: str) -> str:
    """Drop git comment lines and surrounding blank lines."""
    lines = [line.rstrip() for line in raw.splitlines() if not line.startswith("#")]
    return "\n".join(lines).strip()


def check_message(message: str, config: ReviewConfig) -> MessageCheck:
    """Check subject length and format.

    An empty message or an over-long subject blocks; a short subject or a
    subject that does not match the configured format only warns.
    """
    if not message:
        return MessageCheck(ReviewOutcome.BLOCKED, ("Commit message is empty",))

    subject = message.splitlines()[0]
    if len(subject) > config.commit_message_max_length:
        return MessageCheck(
            ReviewOutcome.BLOCKED,
            (
                f"Subject too long ({len(subject)} > "
                f"{config.commit_message_max_length} characters)",
            ),
        )

    problems: list[str] = []
    if len(subject) < config.commit_message_min_length:
        problems.append(
            f"Subject too short ({len(subject)} < {config.commit_message_min_length} characters)"
        )
    if config.enforce_commit_message_format and not re.match(
        config.commit_message_format_regex, subject
    ):
        problems.append(
            "Subject does not follow Conventional Commits: <type>(<scope>): <description>"
        )

    if problems:
        return MessageCheck(ReviewOutcome.PROCEED_WITH_WARNINGS, tuple(problems))
    return MessageCheck(ReviewOutcome.READY_TO_PROCEED)


class CommitMsgHook(Hook):
    """Evaluate the message in ``message_file`` (git's first hook argument)."""

    name = "commit-msg"
    system_prompt = COMMIT_MSG_SYSTEM_PROMPT
    markers = COMMIT_MSG_MARKERS

    def __init__(
        self,
        repo: GitRepository,
        config: ReviewConfig,
        client: ReviewClient,
        *,
        message_file: Path,
        environ: Mapping[str, str],
        confirm: Confirm = tty_confirm,
        console: Console | None = None,
    ) -> None:
        super().__init__(
            repo, config, client, environ=environ, confirm=confirm, console=console
        )
        self.message_file = message_file

    def _report(self, check: MessageCheck) -> None:
        for problem in check.problems:
            self.console.print(f"[yellow]•[/yellow] {problem}")

    async def run(self) -> HookDecision:
        if not self.enabled:
            self.log.info("hook_disabled")
            return HookDecision.allow("commit-msg review disabled")

        try:
            raw = self.message_file.read_text(encoding="utf-8")
        except OSError as e:
            return HookDecision.block(f"Cannot read commit message file: {e}")

        message = clean_message(raw)
        if _SPECIAL_PREFIXES.match(message):
            self.log.info("special_commit_skipped", subject=message.splitlines()[0][:40])
            return HookDecision.allow("Special commit message, not reviewed")

        check = check_message(message, self.config)
        self._report(check)
        if check.outcome is ReviewOutcome.BLOCKED:
            return HookDecision.block(check.problems[0], check.outcome)

        unavailable = self.check_available()
        if unavailable is not None:
            return decide(check.outcome, self.config, self.confirm)

        prompt = build_commit_msg_prompt(message, self.repo.staged_files())
        try:
            ai_outcome = await self.review(prompt)
        except ReviewError as e:
            self.log.warning("message_review_failed", kind=e.kind.value, error=e.message)
            return decide(check.outcome, self.config, self.confirm)

        if ai_outcome is ReviewOutcome.INDETERMINATE:
            outcome = check.outcome
        else:
            outcome = most_severe([check.outcome, ai_outcome])
        return decide(outcome, self.config, self.confirm)
