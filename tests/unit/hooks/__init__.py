"""Unit tests for the pre-commit, commit-msg and pre-push hooks."""

from __future__ import annotations
