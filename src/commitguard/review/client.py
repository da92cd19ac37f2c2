"""Client for the external AI review command.

One :meth:`ReviewClient.review` call is one logical review: a cache lookup,
then up to ``max_retries + 1`` invocations of the command, then a cache write.
The prompt travels on stdin and the system prompt as a separate argument, so
no review content is ever interpreted by a shell.
"""

from __future__ import annotations

import asyncio
import shutil
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from commitguard.config import ReviewConfig
from commitguard.exceptions import CacheError, ReviewError, ReviewErrorKind
from commitguard.logging import get_logger
from commitguard.review.cache import ResponseCache, cache_key
from commitguard.review.retry import RetryPolicy
from commitguard.runners import CommandResult, CommandRunner

__all__ = [
    "ReviewRequest",
    "ReviewClient",
    "ensure_available",
    "classify_failure",
    "CREDENTIAL_ENV_VARS",
]

#: Any one of these is enough for the review command to authenticate
CREDENTIAL_ENV_VARS: tuple[str, ...] = ("ANTHROPIC_API_KEY", "CLAUDE_CODE_OAUTH_TOKEN")

_AUTH_FAILURE_PATTERNS: tuple[str, ...] = (
    "invalid api key",
    "authentication",
    "unauthorized",
    "401",
    "please run /login",
    "not logged in",
)

# A whole response consisting of one of these means the tool never reviewed
_AUTH_PROMPT_PREFIXES: tuple[str, ...] = ("invalid api key", "please run /login")


@dataclass(frozen=True, slots=True)
class ReviewRequest:
    """Everything that identifies one review call."""

    prompt: str
    system_prompt: str
    model: str

    @property
    def cache_key(self) -> str:
        return cache_key(self.prompt, self.system_prompt, self.model)

    def command(self, executable: str) -> list[str]:
        """Argument vector for the review command; the prompt goes on stdin."""
        return [
            executable,
            "--print",
            "--model",
            self.model,
            "--system-prompt",
            self.system_prompt,
        ]


def classify_failure(result: CommandResult, executable: str) -> ReviewError | None:
    """Map a finished invocation to a ReviewError, or None on success.

    Args:
        result: Outcome of one command invocation.
        executable: Command name, for messages.

    Returns:
        The error describing the failure, or None if the output is usable.
    """
    stdout = result.stdout.strip()

    if result.timed_out:
        return ReviewError(
            f"{executable} did not answer within the timeout",
            kind=ReviewErrorKind.TIMEOUT,
            exit_code=result.returncode,
            stderr=result.stderr,
        )

    if result.returncode in (126, 127):
        return ReviewError(
            f"{executable} is not installed or not executable",
            kind=ReviewErrorKind.CLIENT_UNAVAILABLE,
            exit_code=result.returncode,
            stderr=result.stderr,
        )

    if result.returncode != 0:
        combined = result.output.lower()
        if any(pattern in combined for pattern in _AUTH_FAILURE_PATTERNS):
            return ReviewError(
                f"{executable} is not authenticated",
                kind=ReviewErrorKind.UNAUTHORIZED,
                exit_code=result.returncode,
                stderr=result.stderr,
            )
        return ReviewError(
            f"{executable} exited with code {result.returncode}",
            kind=ReviewErrorKind.EXTERNAL_FAILURE,
            exit_code=result.returncode,
            stderr=result.stderr,
        )

    if stdout.lower().startswith(_AUTH_PROMPT_PREFIXES):
        return ReviewError(
            f"{executable} asked for login instead of reviewing",
            kind=ReviewErrorKind.UNAUTHORIZED,
            exit_code=result.returncode,
            stderr=result.stderr,
        )

    if not stdout:
        return ReviewError(
            f"{executable} returned an empty response",
            kind=ReviewErrorKind.EXTERNAL_FAILURE,
            exit_code=result.returncode,
            stderr=result.stderr,
        )

    return None


def ensure_available(
    config: ReviewConfig,
    environ: Mapping[str, str],
    which: Callable[[str], str | None] = shutil.which,
) -> None:
    """Check that the review command can run before building a prompt.

    Raises:
        ReviewError: With kind ``CLIENT_UNAVAILABLE`` if the command is not on
            PATH or no credential is configured.
    """
    if which(config.claude_command) is None:
        raise ReviewError(
            f"{config.claude_command} not found on PATH",
            kind=ReviewErrorKind.CLIENT_UNAVAILABLE,
        )
    if not any(environ.get(name, "").strip() for name in CREDENTIAL_ENV_VARS):
        raise ReviewError(
            f"No credentials for {config.claude_command}: set "
            + " or ".join(CREDENTIAL_ENV_VARS),
            kind=ReviewErrorKind.CLIENT_UNAVAILABLE,
        )


class ReviewClient:
    """Run reviews through the external command with caching and retries.

    Attributes:
        runner: Executes the command.
        cache: Response cache, consulted only when ``config.cache_enabled``.

    Example:
        ```python
        client = ReviewClient(cache=ResponseCache(repo_root / ".claude-hooks-cache", 3600))
        text = await client.review(prompt, system_prompt, config.model, config)
        ```
    """

    def __init__(
        self,
        runner: CommandRunner | None = None,
        cache: ResponseCache | None = None,
        *,
        logger: Any = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.runner = runner if runner is not None else CommandRunner(timeout=None)
        self.cache = cache
        self._log = logger if logger is not None else get_logger(__name__)
        self._sleep = sleep

    @classmethod
    def for_repository(
        cls, repo_root: Path, config: ReviewConfig, **kwargs: Any
    ) -> ReviewClient:
        """Client whose cache lives in ``config.cache_dir`` under ``repo_root``."""
        cache_dir = Path(config.cache_dir)
        if not cache_dir.is_absolute():
            cache_dir = repo_root / cache_dir
        return cls(
            runner=CommandRunner(cwd=repo_root, timeout=None),
            cache=ResponseCache(cache_dir, ttl=config.cache_ttl),
            **kwargs,
        )

    def _cached(self, key: str, config: ReviewConfig) -> str | None:
        if not config.cache_enabled or self.cache is None:
            return None
        try:
            response = self.cache.get(key)
        except CacheError as e:
            self._log.warning("cache_read_failed", key=key, error=e.message)
            return None
        self._log.debug("cache_hit" if response is not None else "cache_miss", key=key)
        return response

    def _store(self, key: str, response: str, config: ReviewConfig) -> None:
        if not config.cache_enabled or self.cache is None:
            return
        try:
            self.cache.put(key, response, model=config.model)
        except CacheError as e:
            self._log.warning("cache_write_failed", key=key, error=e.message)
        else:
            self._log.debug("cache_stored", key=key)

    async def _attempt(
        self, request: ReviewRequest, config: ReviewConfig, attempt: int
    ) -> str:
        self._log.info(
            "review_attempt_started",
            attempt=attempt,
            model=request.model,
            prompt_chars=len(request.prompt),
        )
        result = await self.runner.run(
            request.command(config.claude_command),
            input=request.prompt,
            timeout=config.timeout_seconds,
        )
        error = classify_failure(result, config.claude_command)
        if error is not None:
            self._log.warning(
                "review_attempt_failed",
                attempt=attempt,
                kind=error.kind.value,
                exit_code=result.returncode,
                duration_ms=result.duration_ms,
            )
            raise error
        self._log.info(
            "review_attempt_succeeded",
            attempt=attempt,
            duration_ms=result.duration_ms,
        )
        return result.stdout

    async def review(
        self,
        prompt: str,
        system_prompt: str,
        model: str,
        config: ReviewConfig,
    ) -> str:
        """Obtain a review response for ``prompt``.

        Args:
            prompt: Review request body, sent on stdin.
            system_prompt: Instructions passed with ``--system-prompt``.
            model: Model alias or identifier for ``--model``.
            config: Timeout, retry and cache settings.

        Returns:
            The command's standard output.

        Raises:
            ReviewError: When the last attempt failed, or immediately for
                ``UNAUTHORIZED`` and ``CLIENT_UNAVAILABLE``.
        """
        request = ReviewRequest(prompt=prompt, system_prompt=system_prompt, model=model)
        key = request.cache_key

        cached = self._cached(key, config)
        if cached is not None:
            return cached

        policy = RetryPolicy.from_config(config)
        response = ""
        try:
            async for attempt in policy.retrying(sleep=self._sleep, log=self._log):
                with attempt:
                    response = await self._attempt(
                        request, config, attempt.retry_state.attempt_number
                    )
        except ReviewError as e:
            self._log.error(
                "review_failed",
                kind=e.kind.value,
                max_attempts=policy.max_attempts,
                error=e.message,
            )
            raise

        self._store(key, response, config)
        return response
