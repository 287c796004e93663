"""
Unit tests for MeasurementRegistry.

Covers timer bookkeeping, the measure wrappers, history views and
persistence through an in-memory store. A FakeClock drives every interval
except the scheduling test, which uses the real monotonic clock.
"""

import asyncio
import json
import logging

import pytest
from pydantic import ValidationError

from regionperf.core.errors import TimerNotStartedError
from regionperf.services.metrics.models import Metric
from regionperf.services.metrics.registry import DEFAULT_STORE_KEY, MeasurementRegistry
from regionperf.services.metrics.store import InMemoryStore


def test_end_timer_without_start_raises(registry):
    """Ending a name that was never started fails and leaves state untouched."""
    with pytest.raises(TimerNotStartedError) as exc_info:
        registry.end_timer("never-started")

    assert exc_info.value.name == "never-started"
    assert registry.get_metrics() == []
    assert registry.pending_timers() == []


def test_start_timer_rejects_empty_name(registry):
    with pytest.raises(ValueError):
        registry.start_timer("")

    assert registry.pending_timers() == []


def test_measure_with_empty_name_never_runs_operation(registry):
    """An unnamed measurement fails up front; nothing runs and nothing is left pending."""
    calls = []

    with pytest.raises(ValueError):
        registry.measure("", lambda: calls.append("ran"))

    with pytest.raises(ValueError):
        asyncio.run(registry.measure_async("", lambda: asyncio.sleep(0)))

    assert calls == []
    assert registry.pending_timers() == []
    assert registry.get_metrics() == []


def test_end_timer_computes_rounded_interval(registry, clock):
    """start at 100.0, end at 145.37 -> 45.37ms."""
    clock.t = 100.0
    registry.start_timer("X")
    clock.t = 145.37

    metric = registry.end_timer("X")

    assert metric.name == "X"
    assert metric.value == 45.37
    assert metric.unit == "ms"
    assert metric.timestamp == 1_700_000_000_000
    assert metric.region is None
    assert registry.get_metrics() == [metric]
    assert registry.pending_timers() == []


def test_end_timer_rounds_to_two_places(registry, clock):
    clock.t = 10.0
    registry.start_timer("round")
    clock.t = 10.0 + 3.14159

    assert registry.end_timer("round", region="iad1").value == 3.14


def test_start_at_time_zero_is_a_valid_start(registry, clock):
    clock.t = 0.0
    registry.start_timer("origin")
    clock.t = 5.0

    assert registry.end_timer("origin").value == 5.0


def test_second_start_overwrites_first(registry, clock):
    """Last start wins: the interval is measured from the most recent start."""
    clock.t = 10.0
    registry.start_timer("dup")
    clock.t = 30.0
    registry.start_timer("dup")
    clock.t = 35.0

    metric = registry.end_timer("dup")

    assert metric.value == 5.0
    assert registry.pending_timers() == []
    with pytest.raises(TimerNotStartedError):
        registry.end_timer("dup")


def test_end_timer_attaches_region(registry, clock):
    registry.start_timer("r")
    clock.t = 1.0

    assert registry.end_timer("r", region="fra1").region == "fra1"


def test_measure_returns_result_and_metric(registry, clock):
    def operation():
        clock.t += 12.5
        return "done"

    result, metric = registry.measure("sync-op", operation, region="sfo1")

    assert result == "done"
    assert metric.value == 12.5
    assert metric.region == "sfo1"
    assert registry.get_metrics_by_name("sync-op") == [metric]


def test_measure_failure_propagates_and_clears_pending(registry):
    """A failing operation re-raises the same error and leaves no pending timer."""
    error = ValueError("boom")

    def operation():
        raise error

    with pytest.raises(ValueError) as exc_info:
        registry.measure("failing", operation)

    assert exc_info.value is error
    assert registry.pending_timers() == []
    assert registry.get_metrics() == []

    # Name is immediately reusable
    registry.start_timer("failing")
    assert registry.pending_timers() == ["failing"]


def test_measure_async_failure_propagates_and_clears_pending(registry):
    async def operation():
        await asyncio.sleep(0)
        raise ConnectionError("unreachable")

    with pytest.raises(ConnectionError):
        asyncio.run(registry.measure_async("async-failing", operation))

    assert registry.pending_timers() == []
    assert registry.get_metrics() == []


def test_measure_async_accepts_awaitable(registry, clock):
    async def operation():
        clock.t += 7.0
        return 42

    async def run():
        return await registry.measure_async("awaitable", operation())

    result, metric = asyncio.run(run())

    assert result == 42
    assert metric.value == 7.0


def test_sequential_measures_use_real_clock():
    """Two ~100ms sleeps produce two metrics, in call order, near 100ms each."""
    registry = MeasurementRegistry()

    async def run():
        for _ in range(2):
            await registry.measure_async("Y", lambda: asyncio.sleep(0.1))

    asyncio.run(run())

    metrics = registry.get_metrics_by_name("Y")
    assert len(metrics) == 2
    assert metrics[0].timestamp <= metrics[1].timestamp
    for metric in metrics:
        assert 90.0 <= metric.value <= 150.0


def test_get_metrics_returns_copy(registry, clock):
    registry.start_timer("a")
    clock.t = 1.0
    registry.end_timer("a")

    snapshot = registry.get_metrics()
    snapshot.clear()

    assert len(registry.get_metrics()) == 1


def test_get_metrics_by_name_preserves_order(registry, clock):
    for name, value in [("a", 1.0), ("b", 2.0), ("a", 3.0)]:
        registry.start_timer(name)
        clock.t += value
        registry.end_timer(name)

    values = [m.value for m in registry.get_metrics_by_name("a")]
    assert values == [1.0, 3.0]


def test_clear_metrics_keeps_pending_timers(registry, clock):
    registry.start_timer("done")
    clock.t = 1.0
    registry.end_timer("done")
    registry.start_timer("in-flight")

    registry.clear_metrics()

    assert registry.get_metrics() == []
    clock.t = 4.0
    assert registry.end_timer("in-flight").value == 3.0


def test_export_metrics_is_indented_json_without_empty_region(registry, clock):
    registry.start_timer("plain")
    clock.t = 2.0
    registry.end_timer("plain")
    registry.start_timer("tagged")
    clock.t = 5.0
    registry.end_timer("tagged", region="hnd1")

    exported = registry.export_metrics()
    data = json.loads(exported)

    assert exported.startswith("[\n  {")
    assert data[0] == {"name": "plain", "value": 2.0, "unit": "ms", "timestamp": 1_700_000_000_000}
    assert data[1]["region"] == "hnd1"


def test_save_then_load_appends_equal_metrics(registry, clock, store):
    registry.start_timer("saved")
    clock.t = 8.25
    saved = registry.end_timer("saved", region="iad1")
    registry.save_to_store("k")

    other = MeasurementRegistry(store=store)
    existing = other.record(Metric(name="existing", value=1.0, timestamp=1))

    restored = other.load_from_store("k")

    assert restored == [saved]
    assert other.get_metrics() == [existing, saved]


def test_load_is_additive_not_a_reset(registry, clock):
    registry.start_timer("m")
    clock.t = 1.0
    registry.end_timer("m")
    registry.save_to_store()

    registry.load_from_store()

    assert len(registry.get_metrics()) == 2


def test_load_missing_key_restores_nothing(registry):
    assert registry.load_from_store("absent") == []
    assert registry.get_metrics() == []


@pytest.mark.parametrize("payload", [
    "not json at all",
    '{"name": "object, not a list"}',
    '[{"name": "", "value": 1, "unit": "ms", "timestamp": 1}]',
    '[{"name": "neg", "value": -1, "unit": "ms", "timestamp": 1}]',
    '[{"name": "unit", "value": 1, "unit": "minutes", "timestamp": 1}]',
])
def test_load_malformed_data_is_logged_and_ignored(payload, caplog):
    store = InMemoryStore({DEFAULT_STORE_KEY: payload})
    registry = MeasurementRegistry(store=store)

    with caplog.at_level(logging.WARNING):
        restored = registry.load_from_store()

    assert restored == []
    assert registry.get_metrics() == []
    assert "Failed to load performance metrics" in caplog.text


def test_record_appends_external_metric(registry):
    metric = Metric(name="Server Action - Simple", value=104.2, timestamp=5, region="cdg1")

    registry.record(metric)

    assert registry.get_metrics() == [metric]


def test_metric_is_immutable():
    metric = Metric(name="frozen", value=1.0, timestamp=1)

    with pytest.raises(ValidationError):
        metric.value = 2.0
