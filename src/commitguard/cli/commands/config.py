from __future__ import annotations

from typing import Any

import click

from commitguard.cli.commands._shared import find_repo_root, snapshot_environ
from commitguard.cli.context import ExitCode
from commitguard.cli.output import format_config_error, format_document
from commitguard.config import (
    ReviewConfig,
    read_config_sources,
    resolve_config_with_provenance,
)
from commitguard.constants import HOOK_NAMES, HookName
from commitguard.exceptions import ConfigError


@click.group()
def config() -> None:
    """Inspect commitguard configuration."""
    pass


@config.command("show")
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice(["yaml", "json"]),
    default="yaml",
    help="Output format.",
)
@click.option(
    "--hook",
    "hook_name",
    type=click.Choice(list(HOOK_NAMES)),
    default=None,
    help="Resolve per-hook values (such as the timeout) for this hook.",
)
@click.option(
    "--sources/--no-sources",
    default=True,
    help="Show which source supplied each value.",
)
def show(fmt: str, hook_name: HookName | None, sources: bool) -> None:
    """Display the effective configuration.

    Each setting is listed under its environment variable name, with the
    source it came from: environment, repo config, team config or default.

    Examples:
        commitguard config show
        commitguard config show --format json --hook pre-push
    """
    repo_root = find_repo_root()
    try:
        repo_values, team_values = read_config_sources(repo_root, hook_name)
        resolved, provenance = resolve_config_with_provenance(
            snapshot_environ(), repo_values, team_values
        )
    except ConfigError as e:
        click.echo(format_config_error(e), err=True)
        raise SystemExit(ExitCode.FAILURE) from e

    values = resolved.model_dump(mode="json", by_alias=True)
    document: dict[str, Any] = {}
    for field_name, field in ReviewConfig.model_fields.items():
        key = field.alias or field_name
        if sources:
            document[key] = {"value": values[key], "source": provenance[field_name]}
        else:
            document[key] = values[key]

    click.echo(format_document(document, fmt).rstrip("\n"))
