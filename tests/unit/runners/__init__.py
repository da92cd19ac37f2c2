"""Unit tests for the async command runner."""

from __future__ import annotations
