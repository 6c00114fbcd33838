"""Analyzer interface for the external language-model collaborator."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any

from codesentinel.model import CodeUnit


class Analyzer(ABC):
    """Abstract base class for analyzers that turn rule text plus code into raw findings."""

    @abstractmethod
    def analyze(self, *, rule_text: str, unit: CodeUnit) -> Iterable[Mapping[str, Any]]:
        """Return raw findings for ``unit`` evaluated against ``rule_text``.

        Raw findings are loosely shaped and are validated by the finding
        normalizer before they enter the tree.
        """
