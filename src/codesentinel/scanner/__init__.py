"""Scan orchestration package."""

from __future__ import annotations

from .analyzer import Analyzer
from .orchestrator import build_scan_tree, run_scan

__all__ = ["Analyzer", "build_scan_tree", "run_scan"]
