"""Schema setup for the metrics store.

Kept minimal (no Alembic): every table is created if missing. The kv_store
table has had a single shape since it was introduced, so there are no
additive migrations yet.
"""

from __future__ import annotations

from sqlalchemy.engine import Engine

from regionperf.db.models import Base


def ensure_schema(engine: Engine) -> None:
    """Create any missing tables."""
    Base.metadata.create_all(bind=engine)
