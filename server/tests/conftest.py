"""Shared fixtures: a controllable clock, in-memory storage, and an app wired to them."""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from server.app import app
from server.config import ServerConfig
from server.services import MemoryKeyValueStore, ReportCacheStore
from server.state import AppState, set_state

T0 = 1_792_000_000_000  # epoch ms, fixed start time


class FakeClock:
    """Epoch-ms clock that only moves when told to."""

    def __init__(self, start: int = T0):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return MemoryKeyValueStore()


@pytest.fixture
def cache(storage, clock):
    return ReportCacheStore(storage, max_reports_per_channel=5, ttl=timedelta(days=7), clock=clock)


@pytest.fixture
def app_state(storage, cache):
    config = ServerConfig(report_cache_backend="memory")
    state = AppState(config, storage=storage)
    state.report_cache = cache
    set_state(state)
    yield state
    set_state(None)


@pytest.fixture
def client(app_state):
    with TestClient(app) as c:
        yield c
