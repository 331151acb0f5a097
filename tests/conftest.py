"""
Shared fixtures: fake HTTP sessions, an unstarted scheduler and the service
objects wired together the way ``app.main.create_app`` wires them.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
import requests
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger

from app.api.route_registry import RouteRegistry
from app.cache.memory_store import MemoryCacheStore
from app.config import SourceHTTPSettings
from app.connectors.list_grid_connector import ListGridConnector
from app.scheduler.jobs import JobRegistry
from app.services.cache_refresh_service import CacheRefreshService
from app.services.facility_lookup import FacilityLookup
from app.services.source_reconciler import SourceReconciler


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, *, invalid_json: bool = False) -> None:
        self.status_code = status_code
        self._payload = payload
        self._invalid_json = invalid_json

    def json(self) -> Any:
        if self._invalid_json:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """
    Minimal stand-in for ``requests.Session`` recording every GET.
    """

    def __init__(
        self,
        response: FakeResponse | None = None,
        *,
        error: Exception | None = None,
        on_get: Callable[[str], None] | None = None,
    ) -> None:
        self.response = response or FakeResponse(200, {"listGrid": {"title": "", "headers": [], "rows": []}})
        self.error = error
        self.on_get = on_get
        self.calls: list[dict[str, Any]] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        if self.on_get is not None:
            self.on_get(url)
        if self.error is not None:
            raise self.error
        return self.response


def list_grid_payload(rows: list[Any], *, title: str = "Facilities", headers: list[Any] | None = None) -> dict:
    return {
        "listGrid": {
            "title": title,
            "headers": headers if headers is not None else ["code", "name", "district"],
            "rows": rows,
        }
    }


def warmup_urls(scheduler: BackgroundScheduler) -> list[str]:
    """URLs of queued one-shot refreshes, in queue order."""
    return [job.args[0] for job in scheduler.get_jobs() if isinstance(job.trigger, DateTrigger)]


def cron_job_ids(scheduler: BackgroundScheduler) -> list[str]:
    return sorted(job.id for job in scheduler.get_jobs() if not isinstance(job.trigger, DateTrigger))


@pytest.fixture()
def http_settings() -> SourceHTTPSettings:
    return SourceHTTPSettings(timeout_seconds=5.0, user_agent="facility-cache-tests/1.0")


@pytest.fixture()
def cache_store() -> MemoryCacheStore:
    return MemoryCacheStore()


@pytest.fixture()
def scheduler() -> BackgroundScheduler:
    """Never started: jobs stay pending and never fire during a test."""
    return BackgroundScheduler(timezone="UTC")


@pytest.fixture()
def refresh_calls() -> list[str]:
    return []


@pytest.fixture()
def job_registry(scheduler: BackgroundScheduler, refresh_calls: list[str]) -> JobRegistry:
    return JobRegistry(scheduler=scheduler, refresh=refresh_calls.append, default_timezone="UTC")


@pytest.fixture()
def route_registry() -> RouteRegistry:
    return RouteRegistry()


@pytest.fixture()
def reconciler(
    job_registry: JobRegistry,
    route_registry: RouteRegistry,
    cache_store: MemoryCacheStore,
) -> SourceReconciler:
    return SourceReconciler(
        job_registry=job_registry,
        route_registry=route_registry,
        handler_factory=FacilityLookup(cache_store).handler_for,
    )


@pytest.fixture()
def make_refresh_service(
    http_settings: SourceHTTPSettings,
    cache_store: MemoryCacheStore,
) -> Callable[[FakeSession], CacheRefreshService]:
    def _build(session: FakeSession) -> CacheRefreshService:
        connector = ListGridConnector(http_settings=http_settings, session=session)  # type: ignore[arg-type]
        return CacheRefreshService(connector=connector, cache_store=cache_store)

    return _build


@pytest.fixture()
def connection_error() -> requests.ConnectionError:
    return requests.ConnectionError("connection refused")
