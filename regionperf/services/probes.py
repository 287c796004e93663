"""ProbeRunner - Times a deployment's routes through the MeasurementRegistry.

Probes mirror the dashboard's test buttons. Each probe runs under its own
metric name and probes within a run go one at a time. Two runs against the same
registry would share names, so callers serialize them (the API holds a lock
around each run).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel

from regionperf.core.errors import RemoteCallError
from regionperf.core.logging_config import get_logger
from regionperf.services.metrics.models import Metric
from regionperf.services.metrics.registry import MeasurementRegistry
from regionperf.services.remote.invoker import IRemoteCallInvoker

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProbeSpec:
    """A named remote call to time."""
    name: str
    method: str
    path: str
    params: Dict[str, Any] = field(default_factory=dict)
    json: Optional[Any] = None


class ProbeOutcome(BaseModel):
    name: str
    success: bool
    metric: Optional[Metric] = None
    status_code: Optional[int] = None
    error: Optional[str] = None


DEFAULT_PROBES: Sequence[ProbeSpec] = (
    ProbeSpec("API Route - GET", "GET", "/api/test", params={"delay": 100}),
    ProbeSpec(
        "API Route - POST",
        "POST",
        "/api/test",
        json={"delay": 150, "data": {"test": "performance"}},
    ),
    ProbeSpec("Database API - Queries", "GET", "/api/database", params={"complexity": 2, "queries": 5}),
    ProbeSpec("Page Load - Server Component", "GET", "/server-component"),
)


class ProbeRunner:
    """Runs probes against one deployment and records the timings."""

    def __init__(self, registry: MeasurementRegistry, invoker: IRemoteCallInvoker, region: Optional[str] = None):
        self.registry = registry
        self.invoker = invoker
        self.region = region

    async def run_probe(self, probe: ProbeSpec) -> ProbeOutcome:
        try:
            response, metric = await self.registry.measure_async(
                probe.name,
                lambda: self.invoker.request(
                    probe.method,
                    probe.path,
                    params=probe.params or None,
                    json=probe.json,
                ),
                region=self.region,
            )
        except RemoteCallError as e:
            logger.error(f"Probe '{probe.name}' failed: {e}")
            return ProbeOutcome(name=probe.name, success=False, status_code=e.status_code, error=str(e))

        logger.info(f"Probe '{probe.name}' completed in {metric.value:.2f}ms")
        return ProbeOutcome(name=probe.name, success=True, metric=metric, status_code=response.status_code)

    async def run(self, probes: Sequence[ProbeSpec] = DEFAULT_PROBES, repeat: int = 1) -> List[ProbeOutcome]:
        """Run every probe ``repeat`` times, sequentially, in the given order."""
        if repeat < 1:
            raise ValueError("repeat must be >= 1")

        outcomes: List[ProbeOutcome] = []
        for _ in range(repeat):
            for probe in probes:
                outcomes.append(await self.run_probe(probe))
        return outcomes
