"""Unit tests for the git repository wrapper."""

from __future__ import annotations
