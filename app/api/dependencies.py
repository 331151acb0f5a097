"""
app/api/dependencies.py

Shared FastAPI dependencies resolving the service objects owned by the app.
"""

from __future__ import annotations

from fastapi import Request

from app.api.route_registry import RouteRegistry
from app.scheduler.jobs import JobRegistry
from app.services.source_reconciler import SourceReconciler


def get_reconciler(request: Request) -> SourceReconciler:
    return request.app.state.reconciler


def get_job_registry(request: Request) -> JobRegistry:
    return request.app.state.job_registry


def get_route_registry(request: Request) -> RouteRegistry:
    return request.app.state.route_registry
