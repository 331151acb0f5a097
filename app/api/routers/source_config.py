"""
app/api/routers/source_config.py

Runtime configuration, job status and manual refresh endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_job_registry, get_reconciler
from app.domain.errors import ConfigurationError
from app.scheduler.jobs import JobRegistry
from app.schemas.source_config import (
    JobStatusResponse,
    ReconcileSummaryResponse,
    RefreshAcceptedResponse,
    SourceConfigPayload,
)
from app.services.source_reconciler import SourceReconciler

router = APIRouter(tags=["source-config"])


@router.get("/config", response_model=list[SourceConfigPayload])
def read_config(
    reconciler: SourceReconciler = Depends(get_reconciler),
) -> list[SourceConfigPayload]:
    """
    Return the currently accepted source configuration.
    """

    return [SourceConfigPayload.from_domain(source) for source in reconciler.active_config]


@router.put("/config", response_model=ReconcileSummaryResponse)
def replace_config(
    payload: list[SourceConfigPayload],
    reconciler: SourceReconciler = Depends(get_reconciler),
) -> ReconcileSummaryResponse:
    """
    Replace the source configuration and reconcile jobs and routes to it.
    """

    try:
        summary = reconciler.apply([entry.to_domain() for entry in payload])
    except ConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    return ReconcileSummaryResponse.from_domain(summary)


@router.get("/jobs", response_model=list[JobStatusResponse])
def list_jobs(
    reconciler: SourceReconciler = Depends(get_reconciler),
    job_registry: JobRegistry = Depends(get_job_registry),
) -> list[JobStatusResponse]:
    """
    List live refresh jobs with their schedule and next firing time.
    """

    responses: list[JobStatusResponse] = []
    for source in reconciler.active_config:
        scheduled = job_registry.get(source.url)
        if scheduled is None:
            continue
        responses.append(
            JobStatusResponse(
                url=scheduled.url,
                route_path=source.route_path,
                cron_pattern=scheduled.cron_pattern,
                cron_timezone=scheduled.cron_timezone,
                next_run_time=scheduled.next_run_time,
            )
        )
    return responses


@router.post("/refresh", response_model=RefreshAcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
def refresh_sources(
    reconciler: SourceReconciler = Depends(get_reconciler),
) -> RefreshAcceptedResponse:
    """
    Queue an immediate refresh of every configured source.
    """

    return RefreshAcceptedResponse(triggered=reconciler.refresh_all())
