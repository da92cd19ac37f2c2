"""Shared Rich Console instances for commitguard output.

Review text and decisions go to stderr so that hook stdout stays quiet;
``config show`` writes its document to stdout.
"""

from __future__ import annotations

from rich.console import Console

__all__ = ["console", "err_console"]

console = Console()
err_console = Console(stderr=True)
