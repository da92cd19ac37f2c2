"""Git hook runners: pre-commit, commit-msg and pre-push."""

from __future__ import annotations

from commitguard.hooks.base import Hook
from commitguard.hooks.commit_msg import CommitMsgHook, check_message, clean_message
from commitguard.hooks.decision import HookDecision, decide, no_tty, tty_confirm
from commitguard.hooks.pre_commit import PreCommitHook
from commitguard.hooks.pre_push import PrePushHook

__all__ = [
    "CommitMsgHook",
    "Hook",
    "HookDecision",
    "PreCommitHook",
    "PrePushHook",
    "check_message",
    "clean_message",
    "decide",
    "no_tty",
    "tty_confirm",
]
