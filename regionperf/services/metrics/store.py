"""Persistent store contract and an in-process implementation."""

from typing import Dict, Optional, Protocol


class IPersistentStore(Protocol):
    """String blob storage keyed by string. Last write wins."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class InMemoryStore:
    """Dict-backed store for tests and for running without a database."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
