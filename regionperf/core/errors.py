"""Common exceptions for the region performance service."""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from regionperf.services.metrics.models import Metric


class RegionPerfError(Exception):
    pass


class TimerNotStartedError(RegionPerfError):
    """Raised when a timer is ended without a matching start."""

    def __init__(self, name: str):
        super().__init__(f"Timer {name} was not started")
        self.name = name


class PersistenceReadError(RegionPerfError):
    """Raised when stored metrics cannot be parsed."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Stored metrics under '{key}' are unreadable: {reason}")
        self.key = key
        self.reason = reason


class RemoteCallError(RegionPerfError):
    """Raised when a remote request fails or returns a non-2xx status."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, metric: Optional["Metric"] = None):
        super().__init__(message)
        self.status_code = status_code
        self.metric = metric
