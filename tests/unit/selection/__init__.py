"""Unit tests for file classification and selection."""

from __future__ import annotations
