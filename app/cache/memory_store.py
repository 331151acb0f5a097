"""
In-process cache store.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence

from app.cache.base import CacheNamespace, CacheStore
from app.domain.source_config import CacheRecord


class MemoryCacheNamespace(CacheNamespace):
    def __init__(self, name: str, store: MemoryCacheStore) -> None:
        super().__init__(name)
        self._store = store

    def batch_put(self, records: Sequence[CacheRecord]) -> None:
        staged = {record.key: record.value for record in records}
        with self._store._lock:
            self._store._data.setdefault(self.name, {}).update(staged)

    def replace(self, records: Sequence[CacheRecord]) -> None:
        staged = {record.key: record.value for record in records}
        with self._store._lock:
            self._store._data[self.name] = staged

    def get(self, key: str) -> str | None:
        with self._store._lock:
            return self._store._data.get(self.name, {}).get(key)

    def keys(self) -> list[str]:
        with self._store._lock:
            return sorted(self._store._data.get(self.name, {}))

    def clear(self) -> None:
        with self._store._lock:
            self._store._data.pop(self.name, None)


class MemoryCacheStore(CacheStore):
    """
    Dict-backed store guarded by one lock; contents live for the process.
    """

    def __init__(self) -> None:
        self._data: dict[str, dict[str, str]] = {}
        self._lock = threading.Lock()

    def namespace(self, name: str) -> MemoryCacheNamespace:
        return MemoryCacheNamespace(name, self)

    def namespaces(self) -> list[str]:
        with self._lock:
            return sorted(name for name, entries in self._data.items() if entries)
