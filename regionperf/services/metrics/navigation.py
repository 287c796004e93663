"""Convert browser navigation timings into page load Metrics."""

from typing import Callable, List, Optional

from .clock import wall_clock_ms
from .models import Metric, NavigationTimingModel


def _build(name: str, value: float, region: Optional[str], wall_clock: Callable[[], int]) -> Optional[Metric]:
    # Negative spans mean the page has not finished loading yet
    if value < 0:
        return None
    return Metric(name=name, value=round(value, 2), unit="ms", timestamp=wall_clock(), region=region)


def measure_page_load(timing: NavigationTimingModel, wall_clock: Callable[[], int] = wall_clock_ms) -> Optional[Metric]:
    return _build("Page Load", timing.load_event_end - timing.fetch_start, timing.region, wall_clock)


def measure_ttfb(timing: NavigationTimingModel, wall_clock: Callable[[], int] = wall_clock_ms) -> Optional[Metric]:
    return _build("Time to First Byte (TTFB)", timing.response_start - timing.fetch_start, timing.region, wall_clock)


def measure_fcp(timing: NavigationTimingModel, wall_clock: Callable[[], int] = wall_clock_ms) -> Optional[Metric]:
    if timing.first_contentful_paint is None:
        return None
    return _build("First Contentful Paint (FCP)", timing.first_contentful_paint, timing.region, wall_clock)


def navigation_metrics(timing: NavigationTimingModel, wall_clock: Callable[[], int] = wall_clock_ms) -> List[Metric]:
    """All page load metrics that can be derived from ``timing``."""
    candidates = (
        measure_page_load(timing, wall_clock),
        measure_ttfb(timing, wall_clock),
        measure_fcp(timing, wall_clock),
    )
    return [m for m in candidates if m is not None]
