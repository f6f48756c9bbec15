"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from rooms_mgmt.backends import MemoryKeyValueStore
from rooms_mgmt.models import Tenant
from rooms_mgmt.store import RentalDataStore


class FakeClock:
    """Deterministic clock that advances by ``step`` on every call."""

    def __init__(
        self,
        start: datetime = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc),
        step: timedelta = timedelta(seconds=1),
    ) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now += self.step
        return current


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def clock() -> FakeClock:
    """Clock starting mid-June 2024."""
    return FakeClock()


@pytest.fixture
def backend() -> MemoryKeyValueStore:
    """Empty in-memory key-value store."""
    return MemoryKeyValueStore()


@pytest.fixture
def store(backend: MemoryKeyValueStore, clock: FakeClock) -> RentalDataStore:
    """Fresh data store on an in-memory backend."""
    return RentalDataStore(backend, clock=clock)


@pytest.fixture
def tenant() -> Tenant:
    """Sample tenant."""
    return Tenant(name="Alice", phone="+1 555 0100", address="22 Elm St")


@pytest.fixture
def frozen_clock() -> FakeClock:
    """Clock that returns the same instant on every call."""
    return FakeClock(step=timedelta(0))
