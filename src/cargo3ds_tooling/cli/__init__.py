"""Command-line entry point and argv parsing."""
