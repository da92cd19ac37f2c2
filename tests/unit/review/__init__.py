"""Unit tests for the review client, response cache, retry policy and interpreter."""

from __future__ import annotations
