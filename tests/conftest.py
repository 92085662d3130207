"""Shared fixtures: a store on a fixed clock, settings, and a dispatcher."""
from datetime import datetime, timezone

import pytest

from affairs_core.config import Settings
from affairs_core.context_store import ContextStore
from affairs_mcp.dispatcher import Dispatcher, build_registry

FIXED_NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return ContextStore(clock=clock)


@pytest.fixture
def settings():
    return Settings(_env_file=None, handler_timeout_seconds=5.0)


@pytest.fixture
def dispatcher(store, settings):
    return Dispatcher(build_registry(), store, settings)
