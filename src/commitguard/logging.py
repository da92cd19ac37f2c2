"""Structured logging for commitguard hooks.

Hooks log through structlog on top of the standard library so that:
- the terminal gets a readable, colored stream on stderr (stdout stays free
  for review output),
- ``COMMITGUARD_LOG_FORMAT=json`` switches stderr to JSON lines,
- an optional log file (the ``LOG_FILE`` setting) always receives JSON lines,
  one per event, appended across hook runs.

Usage:
    from commitguard.logging import configure_logging, get_logger

    configure_logging(level=logging.INFO, log_file=Path(".claude-hooks.log"))

    log = get_logger(__name__).bind(hook="pre-commit")
    log.info("files_selected", accepted=3, rejected=1)
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Any

import structlog
from structlog.types import Processor

__all__ = [
    "get_logger",
    "configure_logging",
    "bind_context",
    "clear_context",
    "level_from_name",
]

LOG_FORMAT_ENV_VAR = "COMMITGUARD_LOG_FORMAT"

LOG_LEVEL_ENV_VAR = "COMMITGUARD_LOG_LEVEL"

DEFAULT_LOG_LEVEL = "INFO"


def level_from_name(name: str | None, default: int = logging.INFO) -> int:
    """Translate a level name such as ``"WARN"`` or ``"debug"`` to a constant.

    Args:
        name: Level name; ``WARN`` is accepted as an alias of ``WARNING``.
        default: Level returned for empty or unknown names.

    Returns:
        Logging level constant.
    """
    if not name:
        return default
    normalized = name.strip().upper()
    if normalized == "WARN":
        normalized = "WARNING"
    level = logging.getLevelName(normalized)
    return level if isinstance(level, int) else default


def _get_log_level() -> int:
    return level_from_name(os.environ.get(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL))


def _is_json_output() -> bool:
    return os.environ.get(LOG_FORMAT_ENV_VAR, "").lower() == "json"


def _get_shared_processors() -> list[Processor]:
    """Processors applied to both structlog and foreign stdlib records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _json_formatter() -> logging.Formatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        foreign_pre_chain=_get_shared_processors(),
    )


def _console_formatter() -> logging.Formatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ],
        foreign_pre_chain=_get_shared_processors(),
    )


def configure_logging(
    *,
    force_json: bool = False,
    level: int | None = None,
    log_file: Path | str | None = None,
) -> None:
    """Configure structlog and the root logger for a hook run.

    Safe to call more than once; handlers installed by a previous call are
    replaced.

    Args:
        force_json: Render stderr output as JSON regardless of environment.
        level: Log level. If None, reads ``COMMITGUARD_LOG_LEVEL``.
        log_file: Optional file that receives every record as a JSON line.
            A file that cannot be opened is skipped with a warning.
    """
    use_json = force_json or _is_json_output()
    log_level = level if level is not None else _get_log_level()

    structlog.configure(
        processors=[
            *_get_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setLevel(log_level)
    stream_handler.setFormatter(_json_formatter() if use_json else _console_formatter())
    root_logger.addHandler(stream_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as e:
            get_logger(__name__).warning(
                "log_file_unavailable", path=str(log_file), error=str(e)
            )
        else:
            file_handler.setLevel(log_level)
            file_handler.setFormatter(_json_formatter())
            root_logger.addHandler(file_handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance.

    Args:
        name: Logger name, normally ``__name__``.

    Returns:
        A bound structlog logger.
    """
    log: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return log


def bind_context(**context: Any) -> None:
    """Bind context variables included in every subsequent log record.

    Example:
        bind_context(hook="pre-push", remote="origin")
    """
    structlog.contextvars.bind_contextvars(**context)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
