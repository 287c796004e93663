"""MeasurementRegistry - Session state for named timing intervals.

The registry tracks in-flight timers by name, turns completed intervals into
Metric records, and persists the ordered history through an IPersistentStore.
One registry is constructed per process (or per session) and passed to its
consumers; there is no module-level instance.

Operations are not locked. All access is expected from a single event loop,
and two in-flight timers that share a name will overwrite each other's start.
"""

import inspect
import json
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, TypeVar, Union

from pydantic import ValidationError

from regionperf.core.errors import PersistenceReadError, TimerNotStartedError
from regionperf.core.logging_config import get_logger
from .clock import IClock, MonotonicClock, wall_clock_ms
from .models import Metric, MetricList
from .store import IPersistentStore, InMemoryStore

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_STORE_KEY = "performance-metrics"


class MeasurementRegistry:
    """Records named timing intervals and exposes the resulting Metrics."""

    def __init__(
        self,
        clock: Optional[IClock] = None,
        store: Optional[IPersistentStore] = None,
        wall_clock: Callable[[], int] = wall_clock_ms,
    ):
        self.clock = clock or MonotonicClock()
        self.store = store if store is not None else InMemoryStore()
        self._wall_clock = wall_clock

        # Completed measurements in completion order
        self._metrics: List[Metric] = []

        # In-flight timers keyed by name -> monotonic start (ms)
        self._pending: Dict[str, float] = {}

    def start_timer(self, name: str) -> None:
        """Start (or restart) the timer for ``name``.

        Raises:
            ValueError: ``name`` is empty (it could never become a Metric)
        """
        if not name:
            raise ValueError("Timer name must be a non-empty string")

        # Re-insert so pending_timers() reflects the latest start order
        self._pending.pop(name, None)
        self._pending[name] = self.clock.now()

    def end_timer(self, name: str, region: Optional[str] = None) -> Metric:
        """Stop the timer for ``name`` and record the elapsed time.

        Raises:
            TimerNotStartedError: no pending timer exists for ``name``
        """
        if name not in self._pending:
            raise TimerNotStartedError(name)

        duration = self.clock.now() - self._pending[name]
        metric = Metric(
            name=name,
            value=round(duration, 2),
            unit="ms",
            timestamp=self._wall_clock(),
            region=region,
        )

        self._metrics.append(metric)
        del self._pending[name]
        return metric

    def measure(self, name: str, operation: Callable[[], T], region: Optional[str] = None) -> Tuple[T, Metric]:
        """Time a synchronous callable.

        The pending timer is dropped if ``operation`` raises; the exception
        propagates unchanged and no Metric is recorded.
        """
        self.start_timer(name)
        try:
            result = operation()
        except BaseException:
            self._pending.pop(name, None)
            raise
        return result, self.end_timer(name, region)

    async def measure_async(
        self,
        name: str,
        operation: Union[Callable[[], Awaitable[T]], Awaitable[T]],
        region: Optional[str] = None,
    ) -> Tuple[T, Metric]:
        """Time a coroutine function or awaitable.

        Same failure semantics as measure(); cancellation also clears the timer.
        """
        self.start_timer(name)
        try:
            pending = operation if inspect.isawaitable(operation) else operation()
            result = await pending
        except BaseException:
            self._pending.pop(name, None)
            raise
        return result, self.end_timer(name, region)

    def record(self, metric: Metric) -> Metric:
        """Append a Metric measured outside the registry (e.g. by a browser)."""
        self._metrics.append(metric)
        return metric

    def pending_timers(self) -> List[str]:
        return list(self._pending)

    def get_metrics(self) -> List[Metric]:
        """Full history in completion order. The returned list is a copy."""
        return list(self._metrics)

    def get_metrics_by_name(self, name: str) -> List[Metric]:
        return [m for m in self._metrics if m.name == name]

    def clear_metrics(self) -> None:
        """Drop the recorded history. Pending timers are kept."""
        self._metrics = []

    def export_metrics(self) -> str:
        """Serialize the history as an indented JSON array."""
        return json.dumps(
            [m.model_dump(exclude_none=True) for m in self._metrics],
            indent=2,
        )

    def save_to_store(self, key: str = DEFAULT_STORE_KEY) -> None:
        self.store.set(key, self.export_metrics())
        logger.debug(f"Saved {len(self._metrics)} metrics under '{key}'")

    def load_from_store(self, key: str = DEFAULT_STORE_KEY) -> List[Metric]:
        """Append metrics stored under ``key`` to the in-memory history.

        Loading is additive. Unreadable data is logged and restores nothing.

        Returns:
            The restored metrics (empty when nothing was restored)
        """
        data = self.store.get(key)
        if not data:
            return []

        try:
            restored = self._parse_stored(key, data)
        except PersistenceReadError as e:
            logger.warning(f"Failed to load performance metrics from store: {e}")
            return []

        self._metrics.extend(restored)
        logger.info(f"Restored {len(restored)} metrics from '{key}'")
        return restored

    @staticmethod
    def _parse_stored(key: str, data: Any) -> List[Metric]:
        try:
            return MetricList.validate_json(data)
        except ValidationError as e:
            raise PersistenceReadError(key, f"{e.error_count()} validation error(s)") from e
