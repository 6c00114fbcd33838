"""Ownership exceptions."""

from __future__ import annotations

from codesentinel.exceptions.base import CodeSentinelError


class AuthorizationError(CodeSentinelError, PermissionError):
    """Raised when a user acts on a rule owned by another user."""
