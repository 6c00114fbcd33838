"""Configuration loading and normalization for CodeSentinel.

This package facade re-exports the public names so callers can use
``from codesentinel.config import ...``.
"""

from __future__ import annotations

from codesentinel.config.loader import load_config
from codesentinel.config.model import CodeSentinelConfig

__all__ = ["CodeSentinelConfig", "load_config"]
