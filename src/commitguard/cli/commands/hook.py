from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import click

from commitguard.cli.commands._shared import reconfigure_logging, snapshot_environ
from commitguard.cli.console import err_console
from commitguard.cli.context import ExitCode, async_command
from commitguard.cli.output import format_config_error, format_error
from commitguard.config import ReviewConfig, load_config
from commitguard.constants import HookName
from commitguard.exceptions import CommitGuardError, ConfigError, GitError
from commitguard.git import GitRepository
from commitguard.hooks import (
    CommitMsgHook,
    Hook,
    HookDecision,
    PreCommitHook,
    PrePushHook,
    no_tty,
    tty_confirm,
)
from commitguard.hooks.decision import Confirm
from commitguard.logging import bind_context, clear_context, get_logger
from commitguard.review import ReviewClient

logger = get_logger(__name__)

HookFactory = Callable[
    [GitRepository, ReviewConfig, ReviewClient, dict[str, str], Confirm], Hook
]


@click.group()
@click.option(
    "--no-input",
    is_flag=True,
    default=False,
    help="Never prompt; warnings continue and delay recommendations block.",
)
@click.pass_context
def hook(ctx: click.Context, no_input: bool) -> None:
    """Run a git hook. Intended to be called from .git/hooks scripts."""
    ctx.ensure_object(dict)
    ctx.obj["no_input"] = no_input


def _print_decision(decision: HookDecision) -> None:
    style = "green" if decision.allowed else "red"
    err_console.print(f"[{style}]{decision.reason}[/{style}]")


async def _run_hook(ctx: click.Context, hook_name: HookName, factory: HookFactory) -> None:
    environ = snapshot_environ()
    try:
        repo = GitRepository()
        repo_root = repo.get_repo_root()
        config = load_config(repo_root, environ, hook=hook_name)
    except ConfigError as e:
        click.echo(format_config_error(e), err=True)
        raise SystemExit(ExitCode.FAILURE) from e
    except GitError as e:
        click.echo(format_error(e.message), err=True)
        raise SystemExit(ExitCode.FAILURE) from e

    reconfigure_logging(ctx, config, repo_root)
    bind_context(hook=hook_name)
    confirm: Confirm = no_tty if ctx.obj.get("no_input") else tty_confirm
    client = ReviewClient.for_repository(repo_root, config)

    try:
        decision = await factory(repo, config, client, environ, confirm).run()
    except CommitGuardError as e:
        logger.error("hook_failed", error=e.message, error_type=type(e).__name__)
        click.echo(format_error(e.message), err=True)
        raise SystemExit(ExitCode.FAILURE) from e
    finally:
        clear_context()

    logger.info("hook_finished", allowed=decision.allowed, reason=decision.reason)
    _print_decision(decision)
    raise SystemExit(decision.exit_code)


@hook.command("pre-commit")
@click.pass_context
@async_command
async def pre_commit(ctx: click.Context) -> None:
    """Review staged changes before a commit is created.

    Examples:
        commitguard hook pre-commit
    """
    await _run_hook(
        ctx,
        "pre-commit",
        lambda repo, config, client, environ, confirm: PreCommitHook(
            repo, config, client, environ=environ, confirm=confirm
        ),
    )


@hook.command("commit-msg")
@click.argument("message_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
@async_command
async def commit_msg(ctx: click.Context, message_file: Path) -> None:
    """Check the commit message stored in MESSAGE_FILE.

    Examples:
        commitguard hook commit-msg .git/COMMIT_EDITMSG
    """
    await _run_hook(
        ctx,
        "commit-msg",
        lambda repo, config, client, environ, confirm: CommitMsgHook(
            repo, config, client, message_file=message_file, environ=environ, confirm=confirm
        ),
    )


@hook.command("pre-push")
@click.argument("remote", default="origin")
@click.argument("url", required=False)
@click.pass_context
@async_command
async def pre_push(ctx: click.Context, remote: str, url: str | None) -> None:
    """Review the commits being pushed to REMOTE.

    Git writes one ``<local ref> <local sha> <remote ref> <remote sha>`` line
    per updated ref on stdin.

    Examples:
        commitguard hook pre-push origin git@example.com:team/repo.git
    """
    stdin_text = "" if sys.stdin is None or sys.stdin.isatty() else sys.stdin.read()
    await _run_hook(
        ctx,
        "pre-push",
        lambda repo, config, client, environ, confirm: PrePushHook(
            repo,
            config,
            client,
            remote=remote,
            stdin_text=stdin_text,
            environ=environ,
            confirm=confirm,
        ),
    )
