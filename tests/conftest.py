"""Test configuration and fixtures."""

from datetime import datetime, timedelta, timezone
from typing import Iterator, Optional

import pytest
from fastapi.testclient import TestClient

from ritual_weave.api import create_app
from ritual_weave.domain import RitualCreate
from ritual_weave.state import AppState


class FakeClock:
    """Deterministic clock; every call advances by ``step``."""

    def __init__(
        self,
        start: Optional[datetime] = None,
        step: timedelta = timedelta(seconds=1),
    ):
        self.now = start or datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current

    def set(self, value: datetime) -> None:
        self.now = value


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def state(clock: FakeClock) -> AppState:
    """A fresh, isolated application state."""
    return AppState(clock=clock)


@pytest.fixture
def client(state: AppState) -> Iterator[TestClient]:
    """A TestClient bound to its own application state."""
    yield TestClient(create_app(state=state))


def make_ritual(state: AppState, **overrides):
    """Create a ritual in ``state`` with optional field overrides."""
    defaults = {
        "ritual_key": "weekly-planning",
        "name": "Weekly Planning",
        "instant_runs": False,
        "inputs": [],
    }
    defaults.update(overrides)
    return state.ritual_store.create(RitualCreate(**defaults))
