from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import requests
from fastapi import FastAPI

from app.api.route_registry import RouteRegistry
from app.cache.base import CacheStore
from app.config import (
    CACHE_BACKEND_DATABASE,
    ServiceSettings,
    get_service_settings,
    get_source_http_settings,
)
from app.connectors.list_grid_connector import ListGridConnector
from app.scheduler.jobs import JobRegistry, build_scheduler
from app.schemas.source_config import HealthResponse
from app.services.cache_refresh_service import CacheRefreshService
from app.services.facility_lookup import FacilityLookup
from app.services.source_reconciler import SourceReconciler


def _validate_env() -> ServiceSettings:
    """
    Validate all service environment variables at startup.

    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    settings: ServiceSettings | None = None
    try:
        settings = get_service_settings()
    except RuntimeError as exc:
        errors.append(str(exc))

    if settings is not None and settings.cache_backend == CACHE_BACKEND_DATABASE:
        if not (os.getenv("CACHE_DATABASE_URL", "").strip() or os.getenv("DATABASE_URL", "").strip()):
            errors.append(
                "CACHE_BACKEND=database requires CACHE_DATABASE_URL or DATABASE_URL. "
                "Empty strings are not permitted."
            )

    if settings is not None and settings.sources_config_path is not None:
        from app.sources.loader import resolve_config_path

        if not resolve_config_path(settings.sources_config_path).is_file():
            errors.append(f"SOURCES_CONFIG_PATH '{settings.sources_config_path}' does not exist.")

    if errors or settings is None:
        raise RuntimeError(
            "Startup validation failed: missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )
    return settings


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _build_cache_store(settings: ServiceSettings) -> CacheStore:
    if settings.cache_backend == CACHE_BACKEND_DATABASE:
        from app.cache.sqlalchemy_store import SQLAlchemyCacheStore
        from db.session import get_session_factory

        return SQLAlchemyCacheStore(get_session_factory())

    from app.cache.memory_store import MemoryCacheStore

    return MemoryCacheStore()


def _check_db() -> None:
    """Run SELECT 1 and confirm the cache table exists. Raises RuntimeError otherwise."""
    from sqlalchemy import inspect as sa_inspect
    from sqlalchemy import text

    import db.models  # noqa: F401  registers ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc

    actual: set[str] = set(sa_inspect(get_engine()).get_table_names())
    missing = set(Base.metadata.tables.keys()) - actual
    if missing:
        logging.getLogger(__name__).critical(
            "Schema mismatch: table(s) absent from the database: %s. "
            "Run 'alembic upgrade head' and restart.",
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(f"Schema mismatch: missing table(s) {', '.join(sorted(missing))}.")


def _load_startup_config(application: FastAPI, settings: ServiceSettings) -> None:
    if settings.sources_config_path is None:
        logging.getLogger(__name__).info("No SOURCES_CONFIG_PATH set; waiting for PUT /config")
        return

    from app.sources.loader import load_source_configs

    sources = load_source_configs(config_path=settings.sources_config_path)
    application.state.reconciler.apply(sources)


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Check the database backend, start the scheduler and apply the startup configuration."""
    settings: ServiceSettings = application.state.settings
    if settings.cache_backend == CACHE_BACKEND_DATABASE:
        _check_db()
        logging.getLogger(__name__).info("Cache database validated")

    scheduler = application.state.scheduler
    scheduler.start()
    logging.getLogger(__name__).info("Scheduler started")
    try:
        _load_startup_config(application, settings)
        yield
    finally:
        application.state.reconciler.shutdown()
        scheduler.shutdown(wait=True)
        logging.getLogger(__name__).info("Scheduler shut down")


def _fixed_get_paths(application: FastAPI) -> set[str]:
    """Literal GET paths already routed, which shadow the catch-all lookup dispatcher."""
    paths: set[str] = set()
    for route in application.routes:
        path = getattr(route, "path", "")
        methods = getattr(route, "methods", None) or set()
        if "GET" in methods and path and "{" not in path:
            paths.add(path)
    return paths


def create_app(
    *,
    settings: ServiceSettings | None = None,
    cache_store: CacheStore | None = None,
    http_session: requests.Session | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application and the services it owns.
    """

    if settings is None:
        settings = _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Facility Cache API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    store = cache_store if cache_store is not None else _build_cache_store(settings)
    connector = ListGridConnector(http_settings=get_source_http_settings(), session=http_session)
    refresh_service = CacheRefreshService(connector=connector, cache_store=store)
    scheduler = build_scheduler(timezone=settings.scheduler_timezone)
    job_registry = JobRegistry(
        scheduler=scheduler,
        refresh=refresh_service.refresh,
        default_timezone=settings.scheduler_timezone,
    )
    route_registry = RouteRegistry()

    application.state.settings = settings
    application.state.cache_store = store
    application.state.refresh_service = refresh_service
    application.state.scheduler = scheduler
    application.state.job_registry = job_registry
    application.state.route_registry = route_registry

    from app.api.routers import facility_lookup_router, source_config_router

    @application.get("/health", response_model=HealthResponse)
    def healthcheck() -> HealthResponse:
        return HealthResponse(
            status="ok",
            jobs=len(job_registry.urls()),
            routes=len(route_registry.paths()),
        )

    application.include_router(source_config_router)
    # Sources may not claim a path the dispatcher can never answer on.
    reconciler = SourceReconciler(
        job_registry=job_registry,
        route_registry=route_registry,
        handler_factory=FacilityLookup(store).handler_for,
        reserved_paths=_fixed_get_paths(application),
    )
    application.state.reconciler = reconciler

    # Catch-all lookup dispatcher; keep last.
    application.include_router(facility_lookup_router)

    return application


app = create_app()
