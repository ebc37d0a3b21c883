"""Shared fixtures for the Finance Tracker tests."""

from datetime import datetime, timedelta

import pytest

from finance_tracker.audit import AuditLogger
from finance_tracker.orchestrator import FinanceStateManager
from finance_tracker.services.storage import InMemoryStateStorage


class FakeClock:
    """Controllable replacement for datetime.now."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    # Tuesday, ISO week 10 of 2024
    return FakeClock(datetime(2024, 3, 5, 12, 0, 0))


@pytest.fixture
def storage():
    return InMemoryStateStorage()


@pytest.fixture
def audit_logger():
    return AuditLogger().keep_events()


@pytest.fixture
def manager(storage, audit_logger, clock):
    return FinanceStateManager(
        storage=storage,
        audit_logger=audit_logger,
        clock=clock,
    )
