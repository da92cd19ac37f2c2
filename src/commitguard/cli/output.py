"""Output formatting helpers for commitguard CLI commands."""

from __future__ import annotations

import json
from typing import Any

import yaml

from commitguard.exceptions import ConfigError

__all__ = [
    "format_error",
    "format_config_error",
    "format_document",
]


def format_error(
    message: str, details: list[str] | None = None, suggestion: str | None = None
) -> str:
    """Format an error message with optional details and suggestion.

    Example:
        >>> print(format_error("Not a git repository", suggestion="Run inside a repo"))
        Error: Not a git repository
        Suggestion: Run inside a repo
    """
    lines = [f"Error: {message}"]

    if details:
        for detail in details:
            lines.append(f"  {detail}")

    if suggestion:
        lines.append(f"Suggestion: {suggestion}")

    return "\n".join(lines)


def format_config_error(error: ConfigError) -> str:
    """Format a ConfigError with the offending field and value."""
    details: list[str] = []
    if error.field:
        details.append(f"Field: {error.field}")
    if error.value is not None:
        details.append(f"Value: {error.value}")
    return format_error(
        error.message,
        details=details,
        suggestion="Fix the value in the environment, .claude-hooks-config.sh "
        "or .claude-hooks-team.yml",
    )


def format_document(data: Any, fmt: str) -> str:
    """Render ``data`` as YAML or JSON."""
    if fmt == "json":
        return json.dumps(data, indent=2, ensure_ascii=False)
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
