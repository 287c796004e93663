"""FastAPI dependencies resolving per-app state.

The registry and its settings live on ``app.state`` (set by create_app), so
every handler receives the same explicitly constructed instance.
"""

import asyncio
from typing import Callable

from fastapi import Request

from regionperf.services.metrics.registry import MeasurementRegistry
from regionperf.services.remote.invoker import HttpInvoker


def get_registry(request: Request) -> MeasurementRegistry:
    return request.app.state.registry


def get_store_key(request: Request) -> str:
    return request.app.state.store_key


def get_invoker_factory(request: Request) -> Callable[[str], HttpInvoker]:
    return request.app.state.invoker_factory


def get_probe_lock(request: Request) -> asyncio.Lock:
    return request.app.state.probe_lock


def autosave(request: Request) -> None:
    """Persist the registry if the app was created with autosave enabled."""
    if request.app.state.autosave:
        request.app.state.registry.save_to_store(request.app.state.store_key)
