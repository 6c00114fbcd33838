"""Shared pytest fixtures for CodeSentinel tests."""

from __future__ import annotations

import itertools
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest

from codesentinel.rules import RuleRegistry

BASE_TIME = datetime(2026, 1, 1, tzinfo=UTC)


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """Return a clock that advances one second per call."""
    ticks = itertools.count()
    return lambda: BASE_TIME + timedelta(seconds=next(ticks))


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Return a factory producing predictable rule ids."""
    counter = itertools.count(1)
    return lambda: f"rule-{next(counter)}"


@pytest.fixture
def registry(clock: Callable[[], datetime], id_factory: Callable[[], str]) -> RuleRegistry:
    """Return an empty registry with a deterministic clock and ids."""
    return RuleRegistry(clock=clock, id_factory=id_factory)
