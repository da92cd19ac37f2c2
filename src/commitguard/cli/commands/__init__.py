"""Click command groups registered on the ``commitguard`` entry point."""
