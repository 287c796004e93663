from fastapi import APIRouter, Depends
from pydantic import BaseModel

from regionperf.api.deps import get_registry
from regionperf.core.config import settings
from regionperf.services.metrics.registry import MeasurementRegistry

router = APIRouter()


class RegionInfoModel(BaseModel):
    region: str
    deployment: str


@router.get("/region", response_model=RegionInfoModel)
async def get_region_info():
    """Deployment region and commit this instance is running from"""
    return RegionInfoModel(region=settings.REGION, deployment=settings.DEPLOYMENT)


@router.get("/status")
async def get_status(registry: MeasurementRegistry = Depends(get_registry)):
    """System status endpoint"""
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "region": settings.REGION,
        "metric_count": len(registry.get_metrics()),
        "pending_timers": len(registry.pending_timers()),
    }
