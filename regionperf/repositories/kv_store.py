"""
Key-value persistence for serialized metrics using SQLAlchemy ORM.
"""
import datetime
from typing import Optional
from sqlalchemy.orm import Session

from regionperf.db.models import KeyValueModel
from regionperf.db.session import SessionLocal


class KeyValueRepository:
    """SQLAlchemy ORM-based string store implementing IPersistentStore"""

    def __init__(self, session: Optional[Session] = None):
        self._session = session

    def _get_session(self) -> Session:
        if self._session is not None:
            return self._session
        from regionperf.db.session import get_engine
        get_engine()
        return SessionLocal()

    def _should_close(self) -> bool:
        return self._session is None

    def get(self, key: str) -> Optional[str]:
        """Get the stored value for key, or None"""
        session = self._get_session()
        try:
            row = session.query(KeyValueModel).filter(KeyValueModel.key == key).first()
            return row.value if row else None
        finally:
            if self._should_close():
                session.close()

    def set(self, key: str, value: str) -> None:
        """Create or overwrite the value for key"""
        session = self._get_session()
        try:
            now = datetime.datetime.now(datetime.timezone.utc).isoformat()
            existing = session.query(KeyValueModel).filter(KeyValueModel.key == key).first()
            if existing:
                existing.value = value
                existing.updated_at = now
            else:
                session.add(KeyValueModel(key=key, value=value, updated_at=now))
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            if self._should_close():
                session.close()

    def delete(self, key: str) -> None:
        """Remove key if present"""
        session = self._get_session()
        try:
            session.query(KeyValueModel).filter(KeyValueModel.key == key).delete()
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            if self._should_close():
                session.close()
