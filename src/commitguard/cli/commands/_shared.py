"""Helpers shared by the command groups."""

from __future__ import annotations

import os
from pathlib import Path

import click

from commitguard.cli.context import CLIContext
from commitguard.config import ReviewConfig
from commitguard.exceptions import NotARepositoryError
from commitguard.git import GitRepository
from commitguard.logging import configure_logging

__all__ = ["cli_context", "find_repo_root", "reconfigure_logging", "snapshot_environ"]


def cli_context(ctx: click.Context) -> CLIContext:
    obj = ctx.find_object(dict) or {}
    cli_ctx = obj.get("cli_ctx")
    return cli_ctx if isinstance(cli_ctx, CLIContext) else CLIContext()


def snapshot_environ() -> dict[str, str]:
    """Copy of the process environment taken once per command."""
    return dict(os.environ)


def find_repo_root() -> Path:
    """Repository root, or the current directory outside a repository."""
    try:
        return GitRepository().get_repo_root()
    except NotARepositoryError:
        return Path.cwd()


def reconfigure_logging(ctx: click.Context, config: ReviewConfig, repo_root: Path) -> None:
    """Apply the configured level and log file once configuration is known."""
    log_file: Path | None = None
    if config.log_file:
        log_file = Path(config.log_file)
        if not log_file.is_absolute():
            log_file = repo_root / log_file
    configure_logging(level=cli_context(ctx).log_level(config), log_file=log_file)
