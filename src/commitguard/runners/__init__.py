"""Subprocess execution used to invoke the external review client."""

from __future__ import annotations

from commitguard.runners.command import CommandRunner
from commitguard.runners.models import CommandResult

__all__ = ["CommandRunner", "CommandResult"]
