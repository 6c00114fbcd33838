"""Config data model for CodeSentinel."""

from __future__ import annotations

from dataclasses import dataclass

from codesentinel.constants.rules import DEFAULT_MAX_PROMPT_CHARS, MASTER_RULE_BODY, MASTER_RULE_TITLE
from codesentinel.constants.tree import DEFAULT_ROOT_NAME
from codesentinel.types import Severity


@dataclass(frozen=True)
class CodeSentinelConfig:
    """Resolved core config."""

    max_prompt_chars: int = DEFAULT_MAX_PROMPT_CHARS
    root_name: str = DEFAULT_ROOT_NAME
    min_severity: Severity | None = None
    master_rule_title: str = MASTER_RULE_TITLE
    master_rule_body: str = MASTER_RULE_BODY
