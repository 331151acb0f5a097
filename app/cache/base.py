"""
Cache store interfaces for namespaced facility records.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from app.domain.source_config import CacheRecord


class CacheNamespace(ABC):
    """
    One partition of the cache holding every record of a single source.

    Write operations are atomic: either every record lands or none does.
    Implementations raise ``CacheWriteError`` on failure.
    """

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    def batch_put(self, records: Sequence[CacheRecord]) -> None:
        """
        Upsert all records in one atomic write.
        """

    @abstractmethod
    def replace(self, records: Sequence[CacheRecord]) -> None:
        """
        Atomically drop the current contents and write ``records``.
        """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """
        Return the stored value for ``key``, or None.
        """

    @abstractmethod
    def keys(self) -> list[str]:
        """
        Return all stored keys in sorted order.
        """

    @abstractmethod
    def clear(self) -> None:
        """
        Delete every record in the namespace.
        """


class CacheStore(ABC):
    """
    Namespaced key-value store.
    """

    @abstractmethod
    def namespace(self, name: str) -> CacheNamespace:
        """
        Return a handle for ``name``; namespaces exist implicitly.
        """

    @abstractmethod
    def namespaces(self) -> list[str]:
        """
        Return the names of namespaces that currently hold records.
        """
