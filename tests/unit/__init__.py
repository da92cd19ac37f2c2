"""Unit tests for commitguard."""
