"""SQLAlchemy ORM models.

Engine/session initialization lives in `regionperf.db.session`.
"""

from __future__ import annotations

import datetime

from sqlalchemy import String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class KeyValueModel(Base):
    """SQLAlchemy model for the kv_store table (string blobs keyed by name)."""

    __tablename__ = "kv_store"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[str] = mapped_column(
        String,
        nullable=False,
        default=lambda: datetime.datetime.now(datetime.timezone.utc).isoformat(),
    )

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "value": self.value,
            "updated_at": self.updated_at,
        }
