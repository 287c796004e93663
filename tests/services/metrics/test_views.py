"""Tests for the dashboard read-side helpers."""

import pytest

from regionperf.services.metrics.models import Metric
from regionperf.services.metrics.views import (
    filter_by_category,
    filter_by_substring,
    format_value,
    group_by_region,
    rate,
    summarize,
)


def _m(name: str, value: float, region=None) -> Metric:
    return Metric(name=name, value=value, timestamp=1, region=region)


@pytest.fixture
def mixed():
    return [
        _m("Server Action - Simple", 110.0, "iad1"),
        _m("API Route - GET", 40.0, "iad1"),
        _m("Database API - Queries", 420.0, "fra1"),
        _m("API Route - POST", 60.0),
        _m("Page Load", 800.0),
        _m("Server Action - With Data", 150.0, "fra1"),
    ]


def test_filter_by_substring_keeps_order(mixed):
    names = [m.name for m in filter_by_substring(mixed, "Server Action")]
    assert names == ["Server Action - Simple", "Server Action - With Data"]


def test_api_route_category_excludes_database(mixed):
    names = [m.name for m in filter_by_category(mixed, "api-route")]
    assert names == ["API Route - GET", "API Route - POST"]


def test_database_and_page_load_categories(mixed):
    assert [m.name for m in filter_by_category(mixed, "database-api")] == ["Database API - Queries"]
    assert [m.name for m in filter_by_category(mixed, "page-load")] == ["Page Load"]


def test_unknown_category_raises(mixed):
    with pytest.raises(ValueError):
        filter_by_category(mixed, "widgets")


def test_summarize_latest_mean_count():
    metrics = [_m("x", 10.0), _m("x", 20.0), _m("x", 40.0)]

    summary = summarize(metrics)

    assert summary.count == 3
    assert summary.latest == metrics[-1]
    assert summary.average_ms == pytest.approx(23.33, abs=0.01)
    assert summary.min_ms == 10.0
    assert summary.max_ms == 40.0
    assert summary.p50_ms == 20.0


def test_summarize_empty():
    summary = summarize([])

    assert summary.count == 0
    assert summary.latest is None
    assert summary.average_ms is None
    assert summary.p95_ms is None


def test_group_by_region_uses_unknown_for_missing(mixed):
    groups = group_by_region(mixed)

    assert set(groups) == {"iad1", "fra1", "unknown"}
    assert [m.name for m in groups["unknown"]] == ["API Route - POST", "Page Load"]


@pytest.mark.parametrize("value, expected", [
    (12.345, "12.35ms"),
    (999.99, "999.99ms"),
    (1000.0, "1.00s"),
    (2345.0, "2.35s"),
])
def test_format_value(value, expected):
    assert format_value(value) == expected


@pytest.mark.parametrize("value, expected", [
    (99.9, "good"),
    (100.0, "needs-improvement"),
    (299.9, "needs-improvement"),
    (300.0, "poor"),
])
def test_rate(value, expected):
    assert rate(value) == expected
