import pytest
from fastapi.testclient import TestClient

from regionperf.services.metrics.registry import MeasurementRegistry
from regionperf.services.metrics.store import InMemoryStore


class FakeClock:
    """Settable IClock for deterministic intervals."""

    def __init__(self, start: float = 0.0):
        self.t = start

    def now(self) -> float:
        return self.t


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def registry(clock, store):
    return MeasurementRegistry(clock=clock, store=store, wall_clock=lambda: 1_700_000_000_000)


@pytest.fixture
def client(registry):
    from regionperf.app import create_app

    app = create_app(registry, autoload=False, autosave=False)

    with TestClient(app) as test_client:
        yield test_client
