"""Read-side helpers consumed by the dashboard API and the CLI.

Filtering keeps registry order; aggregation is done with numpy so percentile
math matches what the dashboard charts show.
"""

from typing import Dict, Iterable, List, Sequence

import numpy as np

from .models import Metric, MetricSummaryModel

PAGE_LOAD_NAMES = (
    "Page Load",
    "Time to First Byte (TTFB)",
    "First Contentful Paint (FCP)",
)

CATEGORIES = ("server-action", "api-route", "database-api", "page-load")

UNKNOWN_REGION = "unknown"


def filter_by_substring(metrics: Iterable[Metric], text: str) -> List[Metric]:
    return [m for m in metrics if text in m.name]


def _in_category(name: str, category: str) -> bool:
    if category == "server-action":
        return "Server Action" in name
    if category == "api-route":
        return "API Route" in name and "Database" not in name
    if category == "database-api":
        return "Database API" in name
    return name in PAGE_LOAD_NAMES or name.startswith("Page Load")


def filter_by_category(metrics: Iterable[Metric], category: str) -> List[Metric]:
    """Select metrics belonging to one of the dashboard sections.

    Raises:
        ValueError: ``category`` is not one of CATEGORIES
    """
    if category not in CATEGORIES:
        raise ValueError(f"Unknown metric category '{category}' (expected one of {', '.join(CATEGORIES)})")
    return [m for m in metrics if _in_category(m.name, category)]


def summarize(metrics: Sequence[Metric]) -> MetricSummaryModel:
    """Latest value, mean, count and spread over ``metrics``."""
    if not metrics:
        return MetricSummaryModel(count=0)

    values = np.array([m.value for m in metrics], dtype=float)
    return MetricSummaryModel(
        count=len(metrics),
        latest=metrics[-1],
        average_ms=round(float(values.mean()), 2),
        min_ms=float(values.min()),
        max_ms=float(values.max()),
        p50_ms=round(float(np.percentile(values, 50)), 2),
        p95_ms=round(float(np.percentile(values, 95)), 2),
    )


def group_by_region(metrics: Iterable[Metric]) -> Dict[str, List[Metric]]:
    groups: Dict[str, List[Metric]] = {}
    for m in metrics:
        groups.setdefault(m.region or UNKNOWN_REGION, []).append(m)
    return groups


def format_value(value_ms: float) -> str:
    if value_ms < 1000:
        return f"{value_ms:.2f}ms"
    return f"{value_ms / 1000:.2f}s"


def rate(value_ms: float) -> str:
    """Coarse latency rating used for colouring dashboard values."""
    if value_ms < 100:
        return "good"
    if value_ms < 300:
        return "needs-improvement"
    return "poor"
