"""Unit tests for configuration resolution and config file readers."""

from __future__ import annotations
