"""Clock collaborators used by the MeasurementRegistry."""

import time
from typing import Protocol


class IClock(Protocol):
    """Monotonic, high-resolution timestamp source in milliseconds."""

    def now(self) -> float:
        ...


class MonotonicClock:
    """IClock backed by time.monotonic_ns()."""

    def now(self) -> float:
        return time.monotonic_ns() / 1_000_000.0


def wall_clock_ms() -> int:
    """Current epoch time in whole milliseconds."""
    return int(time.time() * 1000)
