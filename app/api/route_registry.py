"""
app/api/route_registry.py

Routing table for facility lookup paths mounted at runtime.

The table is the single source of truth for which lookup paths the live
server answers: the dispatcher route in ``app.api.routers.facility_lookup``
consults it on every request, so adding or removing a path takes effect
immediately without touching the framework's own route list.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from app.domain.source_config import normalize_route_path

logger = logging.getLogger(__name__)

LookupHandler = Callable[[str], str | None]


class RouteRegistry:
    """
    Mapping of normalized path -> lookup handler.
    """

    def __init__(self) -> None:
        self._routes: dict[str, LookupHandler] = {}
        self._lock = threading.Lock()

    def add(self, path: str, handler: LookupHandler) -> None:
        """
        Mount ``handler`` at ``path``. An existing binding is replaced.
        """

        normalized = normalize_route_path(path)
        with self._lock:
            replaced = normalized in self._routes
            self._routes[normalized] = handler
        logger.info("Lookup route %s path=%s", "replaced" if replaced else "mounted", normalized)

    def remove(self, path: str) -> bool:
        """
        Unmount exactly ``path``. Returns False if it was not mounted.
        """

        normalized = normalize_route_path(path)
        with self._lock:
            removed = self._routes.pop(normalized, None) is not None
        if removed:
            logger.info("Lookup route unmounted path=%s", normalized)
        return removed

    def resolve(self, path: str) -> LookupHandler | None:
        with self._lock:
            return self._routes.get(normalize_route_path(path))

    def has(self, path: str) -> bool:
        return self.resolve(path) is not None

    def paths(self) -> list[str]:
        with self._lock:
            return sorted(self._routes)

    def clear(self) -> None:
        with self._lock:
            self._routes.clear()
