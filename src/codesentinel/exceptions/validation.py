"""Input validation exceptions."""

from __future__ import annotations

from codesentinel.exceptions.base import CodeSentinelError


class ValidationError(CodeSentinelError, ValueError):
    """Raised for malformed paths, findings, severities or rule fields."""
