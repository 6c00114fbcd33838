"""Configuration-related exceptions."""

from __future__ import annotations

from codesentinel.exceptions.base import CodeSentinelError


class ConfigError(CodeSentinelError, ValueError):
    """Raised when a config file or CLI input is invalid."""
