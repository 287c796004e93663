from fastapi import APIRouter
from .system import router as system_router
from .metrics import router as metrics_router
from .probes import router as probes_router

router = APIRouter(prefix="/api/v1")
router.include_router(system_router)
router.include_router(metrics_router)
router.include_router(probes_router)
