"""Shared fixtures for divmod tests."""
from __future__ import annotations

import pytest

from context import Condition, ConditionSet, Context, reset_context


@pytest.fixture(autouse=True)
def fresh_current_context():
    """Every test starts and ends with a default current context."""
    reset_context()
    yield
    reset_context()


@pytest.fixture
def ctx() -> Context:
    """A writable 53-bit context with no traps."""
    return Context()


@pytest.fixture
def readonly_ctx() -> Context:
    return Context(readonly=True)


def trapping(*conditions: Condition, **settings) -> Context:
    """A writable context trapping exactly ``conditions``."""
    return Context(traps=ConditionSet.of(conditions), **settings)


@pytest.fixture
def trap_divzero() -> Context:
    return trapping(Condition.DIVZERO)


@pytest.fixture
def trap_invalid() -> Context:
    return trapping(Condition.INVALID)


@pytest.fixture
def trap_inexact() -> Context:
    return trapping(Condition.INEXACT)
