"""Hypothesis profiles and pytest fixtures for lockledger.

Fixtures build the in-memory stack (store, custody, event bus, quote
source) around a fixed clock so every test sees the same "now".
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from hypothesis import HealthCheck, settings

from lockledger.core.types import UtcDatetime
from lockledger.infra.memory_adapter import (
    InMemoryCustody,
    InMemoryEventBus,
    InMemoryLockStore,
    InMemoryQuoteSource,
)
from lockledger.ledger.engine import ResourceLedger

# ---------------------------------------------------------------------------
# Hypothesis global settings
# ---------------------------------------------------------------------------

settings.register_profile(
    "ci",
    max_examples=200,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    deadline=None,
)
settings.register_profile(
    "dev",
    max_examples=50,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    deadline=None,
)
settings.load_profile("dev")


FIXED_NOW = UtcDatetime(value=datetime(2025, 6, 15, 12, 0, tzinfo=UTC))


# ===================================================================
# FIXTURES
# ===================================================================


@pytest.fixture
def now() -> UtcDatetime:
    return FIXED_NOW


@pytest.fixture
def store() -> InMemoryLockStore:
    return InMemoryLockStore()


@pytest.fixture
def custody() -> InMemoryCustody:
    return InMemoryCustody()


@pytest.fixture
def bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def quotes() -> InMemoryQuoteSource:
    return InMemoryQuoteSource()


@pytest.fixture
def ledger(
    store: InMemoryLockStore, custody: InMemoryCustody, bus: InMemoryEventBus,
) -> ResourceLedger:
    return ResourceLedger(store, custody, bus, clock=lambda: FIXED_NOW)
