"""
app/services/facility_lookup.py

Lookup handlers answering facility codes from one cache namespace.
"""

from __future__ import annotations

from functools import partial

from app.api.route_registry import LookupHandler
from app.cache.base import CacheStore


class FacilityLookup:
    """
    Builds the lookup handler mounted for each source route.
    """

    def __init__(self, cache_store: CacheStore) -> None:
        self._cache_store = cache_store

    def handler_for(self, namespace: str) -> LookupHandler:
        return partial(self.lookup, namespace)

    def lookup(self, namespace: str, code: str) -> str | None:
        """
        Return the cached record for ``code``; None if it was never populated.
        """

        if not code.strip():
            return None
        return self._cache_store.namespace(namespace).get(code)
