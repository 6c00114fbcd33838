"""Scan-rule registry and composition."""

from .composer import compose
from .loader import apply_rules_file, load_rules_file
from .registry import RuleRegistry, active_rule_sort_key, select_active_rules

__all__ = [
    "RuleRegistry",
    "active_rule_sort_key",
    "apply_rules_file",
    "compose",
    "load_rules_file",
    "select_active_rules",
]
