"""FastAPI middleware that reports server-side latency to the client.

Each /api/** response gets a Server-Timing header with the handler duration
and an X-Region header naming the deployment region, so the dashboard can
separate network time from server time.
"""

import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from regionperf.core.config import settings
from regionperf.core.logging_config import get_logger

logger = get_logger(__name__)


class TimingMiddleware(BaseHTTPMiddleware):
    """Adds Server-Timing and X-Region headers to /api/** responses."""

    def __init__(self, app, region: str = settings.REGION):
        super().__init__(app)
        self.region = region

    async def dispatch(self, request: Request, call_next) -> Response:
        # Skip instrumentation for non-API routes
        if not request.url.path.startswith("/api/"):
            return await call_next(request)

        t0 = time.monotonic_ns()
        response = await call_next(request)
        duration_ms = (time.monotonic_ns() - t0) / 1_000_000.0

        response.headers["Server-Timing"] = f"app;dur={duration_ms:.2f}"
        response.headers["X-Region"] = self.region
        logger.debug(f"{request.method} {request.url.path} -> {response.status_code} in {duration_ms:.2f}ms")
        return response
