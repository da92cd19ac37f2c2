from __future__ import annotations


class CommitGuardError(Exception):
    """Base exception class for all commitguard-specific errors.

    This is the root of the commitguard exception hierarchy. Hook runners and
    the CLI catch it at their boundary; system exceptions propagate naturally.

    Attributes:
        message: Human-readable error message describing what went wrong.

    Example:
        ```python
        try:
            decision = await run_pre_commit(repo, config, client)
        except CommitGuardError as e:
            logger.error("hook_failed", error=e.message)
            sys.exit(1)
        ```
    """

    def __init__(self, message: str) -> None:
        """Initialize the CommitGuardError.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(message)
