"""Root exception for CodeSentinel."""

from __future__ import annotations


class CodeSentinelError(Exception):
    """Base class for all errors raised by the CodeSentinel core."""
