"""Unit tests for the commitguard CLI."""

from __future__ import annotations
