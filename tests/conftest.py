"""Shared fixtures for ledger tests."""

from datetime import datetime, timedelta, timezone

import pytest

from clock.ledger.store import LedgerStore
from clock.ledger.types import Ledger

# Display zone used throughout the tests: UTC+2, no DST.
TZ = timezone(timedelta(hours=2))


class FakeClock:
    """Injectable clock returning a settable UTC instant."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set_local(self, day: int, hour: int, minute: int = 0) -> datetime:
        self.now = datetime(2026, 3, day, hour, minute, tzinfo=TZ).astimezone(timezone.utc)
        return self.now


@pytest.fixture
def tz():
    return TZ


@pytest.fixture
def local():
    """Build a UTC instant from a local wall-clock time in March 2026."""
    def make(day: int, hour: int, minute: int = 0) -> datetime:
        return datetime(2026, 3, day, hour, minute, tzinfo=TZ).astimezone(timezone.utc)
    return make


@pytest.fixture
def fake_clock():
    clock = FakeClock(datetime(2026, 3, 10, 7, 0, tzinfo=timezone.utc))  # 09:00 local
    return clock


@pytest.fixture
def store(tz, fake_clock):
    return LedgerStore(Ledger(), tz=tz, clock=fake_clock)
