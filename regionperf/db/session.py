"""SQLAlchemy engine + session initialization for the metrics store.

Engine creation is deferred until first use so tests and the CLI can point the
store at a different database via DATABASE_URL or an explicit URL.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from regionperf.core.logging_config import get_logger

logger = get_logger(__name__)

DB_PATH = Path("config/regionperf.db")

SessionLocal = sessionmaker(autocommit=False, autoflush=False)
_engine: Optional[Engine] = None


def _connect_args(database_url: str) -> dict:
    # FastAPI runs sync dependencies in a threadpool
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


def init_engine(database_url: str | None = None, *, db_path: Path | None = None) -> Engine:
    """Initialize (or re-initialize) the global SQLAlchemy engine.

    Resolution order: explicit ``database_url``, then DATABASE_URL, then a
    SQLite file at ``db_path`` (default config/regionperf.db).
    """

    global _engine

    if database_url is None:
        database_url = os.getenv("DATABASE_URL")

    if database_url is None:
        path = db_path or DB_PATH
        os.makedirs(path.parent, exist_ok=True)
        database_url = f"sqlite:///{path}"

    if _engine is not None:
        _engine.dispose()

    _engine = create_engine(database_url, connect_args=_connect_args(database_url))
    SessionLocal.configure(bind=_engine)
    logger.info(f"Metrics store bound to {_engine.url.render_as_string(hide_password=True)}")
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        return init_engine()
    return _engine
