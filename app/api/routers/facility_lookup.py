"""
app/api/routers/facility_lookup.py

Dispatcher answering facility code lookups on every mounted source path.

This router must be included after all fixed routes: its catch-all path
would otherwise shadow them.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.dependencies import get_route_registry
from app.api.route_registry import RouteRegistry

router = APIRouter(tags=["facility-lookup"])


@router.get("/{route_path:path}")
def lookup_facility(
    route_path: str,
    code: str = Query(..., min_length=1, description="Facility code"),
    route_registry: RouteRegistry = Depends(get_route_registry),
) -> Response:
    """
    Return the cached record for ``code`` from the source mounted at this path.
    """

    handler = route_registry.resolve(route_path)
    if handler is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No facility source is configured for this path.",
        )

    record = handler(code)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Facility '{code}' not found.",
        )
    return Response(content=record, media_type="application/json")
