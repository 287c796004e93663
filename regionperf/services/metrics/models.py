"""Pydantic V2 models for timing metrics and their aggregate views.

Metric is the record produced by the MeasurementRegistry; the remaining
models shape REST responses and persisted payloads.
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

MetricUnit = Literal["ms", "seconds"]


class Metric(BaseModel):
    """One completed timing measurement. Immutable once created."""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    name: str = Field(min_length=1)
    value: float = Field(ge=0)
    unit: MetricUnit = "ms"
    timestamp: int
    region: Optional[str] = None


MetricList = TypeAdapter(List[Metric])


class MetricSummaryModel(BaseModel):
    """Aggregate over a subset of metrics. Statistics are None when count is 0."""
    model_config = ConfigDict(from_attributes=True)

    count: int
    latest: Optional[Metric] = None
    average_ms: Optional[float] = None
    min_ms: Optional[float] = None
    max_ms: Optional[float] = None
    p50_ms: Optional[float] = None
    p95_ms: Optional[float] = None


class RegionSummariesModel(BaseModel):
    regions: Dict[str, MetricSummaryModel]


class NavigationTimingModel(BaseModel):
    """Browser navigation entry, all values in ms relative to the time origin."""

    fetch_start: float = Field(ge=0)
    response_start: float = Field(ge=0)
    load_event_end: float = Field(ge=0)
    first_contentful_paint: Optional[float] = Field(default=None, ge=0)
    region: Optional[str] = None


class TimerStateModel(BaseModel):
    pending: List[str]


class StoreResultModel(BaseModel):
    key: str
    count: int
