"""Map review outcomes to hook decisions and exit codes."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from commitguard.config import ReviewConfig
from commitguard.logging import get_logger
from commitguard.review import ReviewOutcome

__all__ = ["Confirm", "HookDecision", "decide", "tty_confirm", "no_tty"]

logger = get_logger(__name__)

#: Asks a yes/no question; returns None when nobody can answer
Confirm = Callable[[str, bool], "bool | None"]

_TTY_PATH = "/dev/tty"


def tty_confirm(question: str, default: bool) -> bool | None:
    """Ask on the controlling terminal.

    Hooks cannot use stdin (pre-push receives ref lines there), so the
    question goes to ``/dev/tty``. Returns None when there is no terminal.
    """
    suffix = " [Y/n] " if default else " [y/N] "
    try:
        with open(_TTY_PATH, "r+", encoding="utf-8") as tty:
            tty.write(question + suffix)
            tty.flush()
            answer = tty.readline().strip().lower()
    except OSError:
        return None
    if not answer:
        return default
    return answer in ("y", "yes")


def no_tty(question: str, default: bool) -> bool | None:
    """Confirm callback for non-interactive runs."""
    return None


@dataclass(frozen=True, slots=True)
class HookDecision:
    """Whether the git operation may continue.

    Attributes:
        allowed: True to let git proceed.
        reason: Short explanation shown to the user.
        outcome: Review outcome the decision was based on, if any.
    """

    allowed: bool
    reason: str
    outcome: ReviewOutcome | None = None

    @property
    def exit_code(self) -> int:
        return 0 if self.allowed else 1

    @classmethod
    def allow(cls, reason: str, outcome: ReviewOutcome | None = None) -> HookDecision:
        return cls(allowed=True, reason=reason, outcome=outcome)

    @classmethod
    def block(cls, reason: str, outcome: ReviewOutcome | None = None) -> HookDecision:
        return cls(allowed=False, reason=reason, outcome=outcome)


def decide(
    outcome: ReviewOutcome,
    config: ReviewConfig,
    confirm: Confirm = tty_confirm,
) -> HookDecision:
    """Turn a review outcome into a decision.

    ``ShouldDelay`` asks whether to continue anyway (default no) and
    ``ProceedWithWarnings`` asks whether to continue (default yes). Without a
    terminal a delay blocks and warnings allow. ``Indeterminate`` follows
    ``config.indeterminate_policy``.
    """
    if outcome is ReviewOutcome.BLOCKED:
        return HookDecision.block("Review found blocking problems", outcome)

    if outcome is ReviewOutcome.READY_TO_PROCEED:
        return HookDecision.allow("Review passed", outcome)

    if outcome is ReviewOutcome.SHOULD_DELAY:
        answer = confirm("Review recommends waiting. Continue anyway?", False)
        if answer:
            return HookDecision.allow("Continued despite delay recommendation", outcome)
        return HookDecision.block("Review recommends fixing problems first", outcome)

    if outcome is ReviewOutcome.PROCEED_WITH_WARNINGS:
        answer = confirm("Review raised warnings. Continue?", True)
        if answer is False:
            return HookDecision.block("Cancelled after review warnings", outcome)
        return HookDecision.allow("Review passed with warnings", outcome)

    policy = config.indeterminate_policy
    if policy == "allow":
        logger.info("review_indeterminate", policy=policy)
    else:
        logger.warning("review_indeterminate", policy=policy)
    if policy == "block":
        return HookDecision.block("Review verdict could not be determined", outcome)
    return HookDecision.allow("Review verdict could not be determined", outcome)
