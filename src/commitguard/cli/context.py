"""CLI context, exit codes and the async bridge for click commands."""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, TypeVar

from commitguard.config import ReviewConfig
from commitguard.logging import level_from_name

__all__ = [
    "ExitCode",
    "CLIContext",
    "async_command",
]


class ExitCode(IntEnum):
    """Exit codes returned to git.

    Any non-zero code from a hook aborts the git operation.
    """

    SUCCESS = 0
    FAILURE = 1
    INTERRUPTED = 130


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Global options shared by all commands.

    Attributes:
        verbosity: Verbosity level (0=from config, 1=INFO, 2+=DEBUG).
        quiet: Only log errors.
    """

    verbosity: int = 0
    quiet: bool = False

    def log_level(self, config: ReviewConfig | None = None) -> int:
        """Effective log level: quiet > verbose > config > INFO."""
        if self.quiet:
            return logging.ERROR
        if self.verbosity > 0:
            return logging.INFO if self.verbosity == 1 else logging.DEBUG
        if config is None:
            return logging.WARNING
        if config.debug:
            return logging.DEBUG
        return level_from_name(config.log_level)


F = TypeVar("F", bound=Callable[..., Any])


def async_command(f: F) -> F:
    """Decorator to run async Click commands with asyncio.run().

    Example:
        >>> @hook.command("pre-commit")
        >>> @click.pass_context
        >>> @async_command
        >>> async def pre_commit(ctx: click.Context) -> None:
        >>>     decision = await PreCommitHook(...).run()
    """

    @functools.wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return asyncio.run(f(*args, **kwargs))

    return wrapper  # type: ignore[return-value]
