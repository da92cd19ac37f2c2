"""Shared plumbing for the hook runners."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping

from rich.console import Console

from commitguard.config import ReviewConfig
from commitguard.constants import HookName
from commitguard.exceptions import ReviewError, ReviewErrorKind
from commitguard.git import GitRepository
from commitguard.hooks.decision import Confirm, HookDecision, tty_confirm
from commitguard.logging import get_logger
from commitguard.review import ReviewClient, ReviewOutcome, ensure_available, interpret
from commitguard.review.interpreter import Marker

__all__ = ["Hook", "SKIPPABLE_ERRORS", "most_severe"]

#: Review failures that mean "no deep review available" rather than "broken"
SKIPPABLE_ERRORS: frozenset[ReviewErrorKind] = frozenset(
    {ReviewErrorKind.CLIENT_UNAVAILABLE, ReviewErrorKind.UNAUTHORIZED}
)


def most_severe(outcomes: list[ReviewOutcome]) -> ReviewOutcome:
    """The most severe of ``outcomes``; INDETERMINATE when empty."""
    if not outcomes:
        return ReviewOutcome.INDETERMINATE
    return max(outcomes, key=lambda outcome: outcome.severity)


class Hook(ABC):
    """Base class for a git hook run.

    Subclasses set ``name``, ``system_prompt`` and ``markers`` and implement
    :meth:`run`. The hook owns everything interactive: printing the review,
    asking for confirmation and choosing the exit code.
    """

    name: HookName
    system_prompt: str
    markers: tuple[Marker, ...]

    def __init__(
        self,
        repo: GitRepository,
        config: ReviewConfig,
        client: ReviewClient,
        *,
        environ: Mapping[str, str],
        confirm: Confirm = tty_confirm,
        console: Console | None = None,
    ) -> None:
        self.repo = repo
        self.config = config
        self.client = client
        self.environ = environ
        self.confirm = confirm
        self.console = console if console is not None else Console(stderr=True)
        self.log = get_logger(f"commitguard.hooks.{self.name}").bind(hook=self.name)

    @property
    def enabled(self) -> bool:
        return self.config.hook_enabled(self.name)

    def check_available(self) -> ReviewError | None:
        """Return why the deep review cannot run, or None if it can."""
        try:
            ensure_available(self.config, self.environ)
        except ReviewError as e:
            self.log.warning("deep_review_unavailable", reason=e.message)
            return e
        return None

    async def review(self, prompt: str) -> ReviewOutcome:
        """Run one review, print the response and interpret it.

        Raises:
            ReviewError: If the review command fails.
        """
        text = await self.client.review(
            prompt, self.system_prompt, self.config.model, self.config
        )
        self.console.rule(f"[bold]{self.name} review[/bold]")
        self.console.print(text, markup=False, highlight=False)
        self.console.rule()
        outcome = interpret(text, self.markers)
        self.log.info("review_interpreted", outcome=outcome.value)
        return outcome

    def skipped(self, error: ReviewError) -> HookDecision:
        """Decision when the deep review is unavailable."""
        return HookDecision.allow(f"Deep review skipped: {error.message}")

    @abstractmethod
    async def run(self) -> HookDecision:
        """Review the change and decide whether git may proceed."""
        ...
