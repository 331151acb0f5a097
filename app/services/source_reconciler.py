"""
app/services/source_reconciler.py

Reconciles scheduled refresh jobs and mounted lookup routes with the
currently accepted source configuration.

Per source the only transitions are::

    ABSENT  -> ACTIVE    configuration adds it: route mounted, job added,
                         one immediate refresh queued
    ACTIVE  -> ACTIVE'   configuration changes its schedule: job replaced
    ACTIVE  -> ABSENT    configuration drops it: route unmounted, job removed
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Sequence

from app.api.route_registry import LookupHandler, RouteRegistry
from app.domain.errors import ConfigurationError
from app.domain.source_config import ReconcileSummary, SourceConfig, normalize_route_path
from app.logging_utils import log_event
from app.scheduler.jobs import JobRegistry

logger = logging.getLogger(__name__)


class SourceReconciler:
    """
    Owns the last accepted configuration and the state derived from it.

    All mutations run under one lock, so concurrent configuration updates
    are applied one after another.
    """

    def __init__(
        self,
        *,
        job_registry: JobRegistry,
        route_registry: RouteRegistry,
        handler_factory: Callable[[str], LookupHandler],
        reserved_paths: Iterable[str] = (),
    ) -> None:
        self._job_registry = job_registry
        self._route_registry = route_registry
        self._handler_factory = handler_factory
        self._reserved_paths = frozenset(normalize_route_path(path) for path in reserved_paths)
        self._active: list[SourceConfig] = []
        self._lock = threading.RLock()

    @property
    def active_config(self) -> list[SourceConfig]:
        with self._lock:
            return list(self._active)

    def apply(self, new_config: Sequence[SourceConfig]) -> ReconcileSummary:
        """
        Validate and reconcile ``new_config`` against the active list, then
        make it the active list.

        Raises ConfigurationError before mutating anything if the list has
        duplicate source URLs, duplicate route paths, paths taken by fixed
        endpoints or invalid schedules.
        """

        sources = list(new_config)
        with self._lock:
            self.validate(sources)
            summary = self.reconcile(self._active, sources)
            self._active = sources

        log_event(
            logger,
            logging.INFO,
            "configuration_applied",
            sources=len(sources),
            added=len(summary.added),
            rescheduled=len(summary.rescheduled),
            removed=len(summary.removed),
        )
        return summary

    def validate(self, sources: Sequence[SourceConfig]) -> None:
        seen_urls: set[str] = set()
        seen_paths: dict[str, str] = {}
        for source in sources:
            url = source.url
            if url in seen_urls:
                raise ConfigurationError(f"Duplicate source URL in configuration: {url}")
            seen_urls.add(url)

            if source.route_path in self._reserved_paths:
                raise ConfigurationError(
                    f"Route path {source.route_path} of {url} is already served by a fixed endpoint."
                )

            owner = seen_paths.get(source.route_path)
            if owner is not None:
                raise ConfigurationError(
                    f"Route path {source.route_path} is claimed by both {owner} and {url}."
                )
            seen_paths[source.route_path] = url

            self._job_registry.build_trigger(source.cron_pattern, source.cron_timezone)

    def reconcile(
        self,
        old_config: Sequence[SourceConfig],
        new_config: Sequence[SourceConfig],
    ) -> ReconcileSummary:
        """
        Apply the minimal job/route changes turning ``old_config`` into
        ``new_config``.
        """

        summary = ReconcileSummary()
        with self._lock:
            new_urls = {source.url for source in new_config}
            new_paths = {source.route_path for source in new_config}

            for source in new_config:
                url = source.url
                if self._job_registry.has(url):
                    self._job_registry.remove(url)
                    self._job_registry.add(url, source.cron_pattern, source.cron_timezone)
                    if not self._route_registry.has(source.route_path):
                        self._mount(source)
                    summary.rescheduled.append(url)
                else:
                    # Mount first so the route never answers before a populate attempt exists.
                    self._mount(source)
                    self._job_registry.add(url, source.cron_pattern, source.cron_timezone)
                    self._job_registry.trigger_now(url)
                    summary.added.append(url)

            for source in old_config:
                # A path may outlive its source when another source now claims it.
                if source.route_path not in new_paths:
                    self._route_registry.remove(source.route_path)
                if source.url not in new_urls:
                    self._job_registry.remove(source.url)
                    summary.removed.append(source.url)

        for url in summary.added:
            log_event(logger, logging.INFO, "source_added", url=url)
        for url in summary.rescheduled:
            log_event(logger, logging.INFO, "source_rescheduled", url=url)
        for url in summary.removed:
            log_event(logger, logging.INFO, "source_removed", url=url)
        return summary

    def refresh_all(self) -> list[str]:
        """
        Queue an immediate refresh of every active source.
        """

        with self._lock:
            urls = [source.url for source in self._active]
        for url in urls:
            self._job_registry.trigger_now(url)
        return urls

    def shutdown(self) -> None:
        """
        Remove every job and route; the active list is forgotten.
        """

        with self._lock:
            self._job_registry.remove_all()
            self._route_registry.clear()
            self._active = []
        logger.info("Source reconciler shut down")

    def _mount(self, source: SourceConfig) -> None:
        self._route_registry.add(source.route_path, self._handler_factory(source.namespace))
