"""Rule registry and composition exceptions."""

from __future__ import annotations

from codesentinel.exceptions.base import CodeSentinelError


class InvalidOperationError(CodeSentinelError):
    """Raised when an operation violates a rule-set invariant.

    Examples are deleting a master rule, provisioning a second master rule
    for the same user, or composing an empty active rule set.
    """


class NotFoundError(CodeSentinelError, LookupError):
    """Raised when a rule id does not exist."""
