"""CodeSentinel scan-result tree and scan-rule composition core."""

from __future__ import annotations

__version__ = "0.4.0"
