from __future__ import annotations

from typing import Any

from commitguard.exceptions.base import CommitGuardError


class ConfigError(CommitGuardError):
    """Exception for configuration loading, parsing, and validation errors.

    Raised when an override value cannot be parsed for its field, when a
    config file cannot be read, or when the team YAML file is malformed. A
    ConfigError aborts the hook run: it is a setup failure, not a review
    failure.

    Attributes:
        message: Human-readable error message describing the configuration issue.
        field: Optional setting name that caused the error (e.g., "MAX_FILE_SIZE").
        value: Optional raw value that failed validation.

    Examples:
        ```python
        # YAML parsing failure
        raise ConfigError("Invalid YAML in .claude-hooks-team.yml: ...")

        # Malformed environment override
        raise ConfigError(
            "Invalid value for CLAUDE_TIMEOUT from environment",
            field="CLAUDE_TIMEOUT",
            value="soon",
        )
        ```
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        """Initialize the ConfigError.

        Args:
            message: Human-readable error message.
            field: Optional setting name that caused the error.
            value: Optional raw value that failed validation.
        """
        self.field = field
        self.value = value
        super().__init__(message)
