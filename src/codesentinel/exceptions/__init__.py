"""Shared exception hierarchy for CodeSentinel."""

from __future__ import annotations

from .authorization import AuthorizationError
from .base import CodeSentinelError
from .config import ConfigError
from .rules import InvalidOperationError, NotFoundError
from .validation import ValidationError

__all__ = [
    "AuthorizationError",
    "CodeSentinelError",
    "ConfigError",
    "InvalidOperationError",
    "NotFoundError",
    "ValidationError",
]
