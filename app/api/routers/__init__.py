"""
app/api/routers package marker.
"""

from app.api.routers.facility_lookup import router as facility_lookup_router
from app.api.routers.source_config import router as source_config_router

__all__ = [
    "facility_lookup_router",
    "source_config_router",
]
