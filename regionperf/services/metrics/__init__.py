"""Timing measurement and aggregation for the region performance dashboard.

The MeasurementRegistry is the only stateful piece; everything else in this
package is a pure helper over Metric sequences.
"""

from .clock import IClock, MonotonicClock, wall_clock_ms
from .models import Metric, MetricSummaryModel, NavigationTimingModel
from .registry import DEFAULT_STORE_KEY, MeasurementRegistry
from .store import IPersistentStore, InMemoryStore

__all__ = [
    "DEFAULT_STORE_KEY",
    "IClock",
    "IPersistentStore",
    "InMemoryStore",
    "MeasurementRegistry",
    "Metric",
    "MetricSummaryModel",
    "MonotonicClock",
    "NavigationTimingModel",
    "wall_clock_ms",
]
