"""Probe endpoints: time a deployment's routes from this server."""

import asyncio
from typing import Callable, List, Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import AnyHttpUrl, BaseModel, Field

from regionperf.api.deps import autosave, get_invoker_factory, get_probe_lock, get_registry
from regionperf.core.config import settings
from regionperf.core.logging_config import get_logger
from regionperf.services.metrics.registry import MeasurementRegistry
from regionperf.services.probes import ProbeOutcome, ProbeRunner
from regionperf.services.remote.invoker import HttpInvoker

logger = get_logger(__name__)

router = APIRouter(prefix="/probes", tags=["probes"])


class ProbeRunRequest(BaseModel):
    target_url: Optional[AnyHttpUrl] = None
    region: Optional[str] = None
    repeat: int = Field(default=1, ge=1, le=20)


@router.post("/run", response_model=List[ProbeOutcome], response_model_exclude_none=True)
async def run_probes(
    body: ProbeRunRequest,
    request: Request,
    registry: MeasurementRegistry = Depends(get_registry),
    invoker_factory: Callable[[str], HttpInvoker] = Depends(get_invoker_factory),
    probe_lock: asyncio.Lock = Depends(get_probe_lock),
):
    """Run the default probe suite against ``target_url`` and record timings.

    Overlapping requests queue on the app's probe lock, since every run reuses
    the same metric names on the shared registry.

    Raises:
        HTTPException: 400 if the configured target URL cannot be parsed
    """
    # AnyHttpUrl normalizes a bare host to end in "/"; probe paths carry their own
    target_url = str(body.target_url).rstrip("/") if body.target_url else settings.PROBE_TARGET_URL
    region = body.region or settings.REGION

    try:
        httpx.URL(target_url)
    except httpx.InvalidURL as e:
        logger.error(f"Invalid probe target '{target_url}': {e}")
        raise HTTPException(status_code=400, detail=f"Invalid target URL: {e}")

    async with probe_lock:
        async with invoker_factory(target_url) as invoker:
            outcomes = await ProbeRunner(registry, invoker, region=region).run(repeat=body.repeat)

    autosave(request)
    return outcomes
