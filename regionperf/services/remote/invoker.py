"""Remote call invoker used to time deployed routes over HTTP.

The invoker performs one request/response round trip and reports failure as
RemoteCallError. Timeouts are enforced here by the httpx client; the
MeasurementRegistry itself never times out.
"""

import time
from typing import Any, Dict, Optional, Protocol, Tuple

import httpx

from regionperf.core.errors import RemoteCallError
from regionperf.core.logging_config import get_logger
from regionperf.services.metrics.clock import wall_clock_ms
from regionperf.services.metrics.models import Metric

logger = get_logger(__name__)


class IRemoteCallInvoker(Protocol):
    """Protocol for anything that can perform a timed remote call."""

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> httpx.Response:
        ...


class HttpInvoker:
    """httpx-backed invoker bound to a single deployment base URL.

    Usage example:
    ```python
    async with HttpInvoker("https://example.vercel.app") as invoker:
        response = await invoker.request("GET", "/api/test", params={"delay": 100})
    ```
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "HttpInvoker":
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> httpx.Response:
        """Perform one request.

        Raises:
            RemoteCallError: on transport/timeout errors or a non-2xx status
        """
        if self._client is None:
            raise RuntimeError("HttpInvoker must be used as an async context manager")

        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.TimeoutException as e:
            raise RemoteCallError(f"{method} {path} timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise RemoteCallError(f"{method} {path} failed: {e}") from e

        if not response.is_success:
            raise RemoteCallError(
                f"{method} {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response


async def measure_network_request(
    invoker: IRemoteCallInvoker,
    method: str,
    path: str,
    params: Optional[Dict[str, Any]] = None,
    json: Optional[Any] = None,
) -> Tuple[httpx.Response, Metric]:
    """Time a single request without going through a registry.

    On failure the raised RemoteCallError carries a 'Failed Network Request'
    metric covering the time spent before the error.
    """
    t0 = time.monotonic_ns()
    try:
        response = await invoker.request(method, path, params=params, json=json)
    except RemoteCallError as e:
        elapsed_ms = (time.monotonic_ns() - t0) / 1_000_000.0
        e.metric = Metric(
            name=f"Failed Network Request: {path}",
            value=round(elapsed_ms, 2),
            unit="ms",
            timestamp=wall_clock_ms(),
        )
        raise

    elapsed_ms = (time.monotonic_ns() - t0) / 1_000_000.0
    metric = Metric(
        name=f"Network Request: {path}",
        value=round(elapsed_ms, 2),
        unit="ms",
        timestamp=wall_clock_ms(),
    )
    logger.debug(f"{method} {path} took {elapsed_ms:.2f}ms")
    return response, metric
