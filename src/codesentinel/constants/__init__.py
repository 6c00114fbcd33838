"""Shared constants for CodeSentinel."""
