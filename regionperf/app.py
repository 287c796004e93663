import asyncio
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from regionperf.api.v1 import router as api_router
from regionperf.core.config import settings
from regionperf.core.logging_config import get_logger
from regionperf.db.migrate import ensure_schema
from regionperf.db.session import init_engine
from regionperf.middleware.timing_middleware import TimingMiddleware
from regionperf.repositories import KeyValueRepository
from regionperf.services.metrics.registry import MeasurementRegistry
from regionperf.services.remote.invoker import HttpInvoker

logger = get_logger("app")


def build_registry() -> MeasurementRegistry:
    """Registry persisted to the SQLite kv_store table."""
    return MeasurementRegistry(store=KeyValueRepository())


def default_invoker_factory(base_url: str) -> HttpInvoker:
    return HttpInvoker(base_url, timeout=settings.PROBE_TIMEOUT_S)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    registry: MeasurementRegistry = app.state.registry
    if isinstance(registry.store, KeyValueRepository):
        engine = init_engine()
        ensure_schema(engine)

    if app.state.autoload:
        restored = registry.load_from_store(app.state.store_key)
        logger.info(f"Startup restored {len(restored)} metrics")

    yield

    # Shutdown
    if app.state.autosave:
        registry.save_to_store(app.state.store_key)


def create_app(
    registry: Optional[MeasurementRegistry] = None,
    *,
    autoload: Optional[bool] = None,
    autosave: Optional[bool] = None,
    store_key: Optional[str] = None,
    invoker_factory: Callable[[str], HttpInvoker] = default_invoker_factory,
) -> FastAPI:
    """Build the API around one explicitly constructed registry."""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Latency measurements for pages, server actions and API routes across regions",
        version=settings.VERSION,
        lifespan=lifespan,
    )

    app.state.registry = registry if registry is not None else build_registry()
    app.state.autoload = settings.METRICS_AUTOLOAD if autoload is None else autoload
    app.state.autosave = settings.METRICS_AUTOSAVE if autosave is None else autosave
    app.state.store_key = store_key or settings.METRICS_STORE_KEY
    app.state.invoker_factory = invoker_factory
    # Probe runs share the registry; one run at a time
    app.state.probe_lock = asyncio.Lock()

    app.add_middleware(TimingMiddleware, region=settings.REGION)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Server-Timing", "X-Region"],
    )

    app.include_router(api_router)
    return app


app = create_app()
