"""
conftest.py - Shared pytest fixtures for rent ledger tests

Provides common fixtures used across unit and conformance tests:
- A manual clock starting at a fixed instant
- In-memory custody with funded tenant and landlord wallets
- A recording event sink
- An empty ledger and a ledger with one created record ("h1")
"""

import pytest
from decimal import Decimal

from rentledger import (
    RentLedger, ManualClock, InMemoryCustody, RecordingEventSink,
)

from tests.ledger_helpers import ADMIN, LANDLORD, TENANT, T0, create_record


@pytest.fixture
def clock():
    return ManualClock(T0)


@pytest.fixture
def custody():
    custody = InMemoryCustody("rentledger")
    custody.issue(TENANT, Decimal("10000"))
    custody.issue(LANDLORD, Decimal("10000"))
    return custody


@pytest.fixture
def sink():
    return RecordingEventSink()


@pytest.fixture
def ledger(clock, custody, sink):
    """Empty ledger administered by ADMIN."""
    return RentLedger(ADMIN, clock=clock, custody=custody, event_sink=sink)


@pytest.fixture
def ledger_with_record(ledger):
    """Ledger holding record "h1", owned by LANDLORD."""
    create_record(ledger, "h1")
    return ledger
