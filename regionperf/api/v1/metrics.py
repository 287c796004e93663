"""Measurement REST API endpoints.

Read, aggregate, timer, export and persistence operations over the app's
MeasurementRegistry. Mutating endpoints persist to the store when the app was
created with autosave enabled.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from regionperf.api.deps import autosave, get_registry, get_store_key
from regionperf.core.errors import TimerNotStartedError
from regionperf.core.logging_config import get_logger
from regionperf.services.metrics.clock import wall_clock_ms
from regionperf.services.metrics.models import (
    Metric,
    MetricSummaryModel,
    NavigationTimingModel,
    RegionSummariesModel,
    StoreResultModel,
    TimerStateModel,
)
from regionperf.services.metrics.navigation import navigation_metrics
from regionperf.services.metrics.registry import MeasurementRegistry
from regionperf.services.metrics.views import (
    filter_by_category,
    filter_by_substring,
    group_by_region,
    summarize,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/metrics", tags=["metrics"])


def _select(
    registry: MeasurementRegistry,
    name: Optional[str],
    contains: Optional[str],
    category: Optional[str],
) -> List[Metric]:
    metrics = registry.get_metrics_by_name(name) if name else registry.get_metrics()
    if contains:
        metrics = filter_by_substring(metrics, contains)
    if category:
        try:
            metrics = filter_by_category(metrics, category)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    return metrics


@router.get("/", response_model=List[Metric], response_model_exclude_none=True)
async def list_metrics(
    name: Optional[str] = Query(None, description="Exact metric name"),
    contains: Optional[str] = Query(None, description="Substring of the metric name"),
    category: Optional[str] = Query(None, description="Dashboard section, e.g. 'api-route'"),
    registry: MeasurementRegistry = Depends(get_registry),
):
    """List recorded metrics in completion order."""
    return _select(registry, name, contains, category)


@router.get("/summary", response_model=MetricSummaryModel)
async def get_summary(
    name: Optional[str] = Query(None),
    contains: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    registry: MeasurementRegistry = Depends(get_registry),
):
    """Latest, average and count (plus spread) over the selected metrics."""
    return summarize(_select(registry, name, contains, category))


@router.get("/regions", response_model=RegionSummariesModel)
async def get_region_summaries(
    contains: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    registry: MeasurementRegistry = Depends(get_registry),
):
    """Per-region summaries, for comparing the same route across deployments."""
    groups = group_by_region(_select(registry, None, contains, category))
    return RegionSummariesModel(regions={region: summarize(ms) for region, ms in groups.items()})


@router.post("/", response_model=Metric, status_code=201, response_model_exclude_none=True)
async def record_metric(
    metric: Metric,
    request: Request,
    registry: MeasurementRegistry = Depends(get_registry),
):
    """Record a metric measured by the client."""
    registry.record(metric)
    autosave(request)
    return metric


@router.delete("/")
async def clear_metrics(
    request: Request,
    purge_store: bool = Query(False, description="Also overwrite the stored history"),
    registry: MeasurementRegistry = Depends(get_registry),
    key: str = Depends(get_store_key),
):
    """Clear the recorded history. Pending timers are unaffected."""
    cleared = len(registry.get_metrics())
    registry.clear_metrics()
    if purge_store:
        registry.save_to_store(key)
    else:
        autosave(request)
    logger.info(f"Cleared {cleared} metrics (purge_store={purge_store})")
    return {"status": "success", "cleared": cleared}


@router.get("/export")
async def export_metrics(registry: MeasurementRegistry = Depends(get_registry)):
    """Download the full history as JSON."""
    filename = f"performance-metrics-{wall_clock_ms()}.json"
    return Response(
        content=registry.export_metrics(),
        media_type="application/json",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.post("/save", response_model=StoreResultModel)
async def save_metrics(
    key: Optional[str] = Query(None),
    registry: MeasurementRegistry = Depends(get_registry),
    default_key: str = Depends(get_store_key),
):
    store_key = key or default_key
    registry.save_to_store(store_key)
    return StoreResultModel(key=store_key, count=len(registry.get_metrics()))


@router.post("/load", response_model=StoreResultModel)
async def load_metrics(
    key: Optional[str] = Query(None),
    registry: MeasurementRegistry = Depends(get_registry),
    default_key: str = Depends(get_store_key),
):
    """Append stored metrics to the in-memory history. Unreadable data loads nothing."""
    store_key = key or default_key
    restored = registry.load_from_store(store_key)
    return StoreResultModel(key=store_key, count=len(restored))


@router.get("/timers", response_model=TimerStateModel)
async def list_timers(registry: MeasurementRegistry = Depends(get_registry)):
    return TimerStateModel(pending=registry.pending_timers())


@router.post("/timers/{name:path}/start", status_code=202)
async def start_timer(name: str, registry: MeasurementRegistry = Depends(get_registry)):
    registry.start_timer(name)
    return {"status": "started", "name": name}


@router.post("/timers/{name:path}/end", response_model=Metric, response_model_exclude_none=True)
async def end_timer(
    name: str,
    request: Request,
    region: Optional[str] = Query(None),
    registry: MeasurementRegistry = Depends(get_registry),
):
    """Stop a timer and record its Metric.

    Raises:
        HTTPException: 409 if no timer with this name is running
    """
    try:
        metric = registry.end_timer(name, region)
    except TimerNotStartedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    autosave(request)
    return metric


@router.post("/navigation", response_model=List[Metric], response_model_exclude_none=True)
async def record_navigation(
    timing: NavigationTimingModel,
    request: Request,
    registry: MeasurementRegistry = Depends(get_registry),
):
    """Derive Page Load / TTFB / FCP metrics from a browser navigation entry."""
    metrics = navigation_metrics(timing)
    for metric in metrics:
        registry.record(metric)
    autosave(request)
    return metrics
