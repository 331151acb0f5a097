"""
app/services package marker.
"""

from app.services.cache_refresh_service import CacheRefreshService
from app.services.facility_lookup import FacilityLookup
from app.services.source_reconciler import SourceReconciler

__all__ = [
    "CacheRefreshService",
    "FacilityLookup",
    "SourceReconciler",
]
