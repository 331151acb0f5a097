"""
app/cache package marker.
"""

from app.cache.base import CacheNamespace, CacheStore
from app.cache.memory_store import MemoryCacheStore
from app.cache.sqlalchemy_store import SQLAlchemyCacheStore

__all__ = [
    "CacheNamespace",
    "CacheStore",
    "MemoryCacheStore",
    "SQLAlchemyCacheStore",
]
