"""CLI entry point for commitguard.

Git hook scripts call ``commitguard hook <name> ...``; the ``config`` and
``cache`` groups are for people setting the hooks up.
"""

from __future__ import annotations

import click

from commitguard import __version__
from commitguard.cli.commands.cache import cache
from commitguard.cli.commands.config import config
from commitguard.cli.commands.hook import hook
from commitguard.cli.context import CLIContext
from commitguard.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="commitguard")
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v for INFO, -vv for DEBUG).",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    default=False,
    help="Suppress non-essential output (ERROR level only).",
)
@click.pass_context
def cli(ctx: click.Context, verbose: int, quiet: bool) -> None:
    """commitguard - AI code review for git hooks."""
    ctx.ensure_object(dict)
    cli_ctx = CLIContext(verbosity=verbose, quiet=quiet)
    ctx.obj["cli_ctx"] = cli_ctx

    # Hook commands reconfigure once the repository config is loaded
    configure_logging(level=cli_ctx.log_level())


cli.add_command(hook)
cli.add_command(config)
cli.add_command(cache)

if __name__ == "__main__":
    cli()
