"""Command-line interface for commitguard."""
