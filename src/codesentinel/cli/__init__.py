"""Command-line interface for CodeSentinel."""
