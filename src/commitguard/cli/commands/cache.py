from __future__ import annotations

from pathlib import Path

import click

from commitguard.cli.commands._shared import find_repo_root, snapshot_environ
from commitguard.cli.console import console
from commitguard.cli.context import ExitCode
from commitguard.cli.output import format_config_error, format_error
from commitguard.config import load_config
from commitguard.exceptions import CacheError, ConfigError
from commitguard.review import ResponseCache


def _open_cache() -> ResponseCache:
    repo_root = find_repo_root()
    try:
        resolved = load_config(repo_root, snapshot_environ())
    except ConfigError as e:
        click.echo(format_config_error(e), err=True)
        raise SystemExit(ExitCode.FAILURE) from e
    directory = Path(resolved.cache_dir)
    if not directory.is_absolute():
        directory = repo_root / directory
    return ResponseCache(directory, ttl=resolved.cache_ttl)


@click.group()
def cache() -> None:
    """Manage the review response cache."""
    pass


@cache.command("clean")
def clean() -> None:
    """Remove expired cache entries.

    Examples:
        commitguard cache clean
    """
    response_cache = _open_cache()
    try:
        removed = response_cache.purge_expired()
    except CacheError as e:
        click.echo(format_error(e.message), err=True)
        raise SystemExit(ExitCode.FAILURE) from e
    console.print(f"Removed {removed} expired entries from {response_cache.directory}")


@cache.command("clear")
def clear() -> None:
    """Remove every cache entry.

    Examples:
        commitguard cache clear
    """
    response_cache = _open_cache()
    try:
        removed = response_cache.clear()
    except CacheError as e:
        click.echo(format_error(e.message), err=True)
        raise SystemExit(ExitCode.FAILURE) from e
    console.print(f"Removed {removed} entries from {response_cache.directory}")
