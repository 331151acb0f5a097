"""
app/schemas package marker.
"""

from app.schemas.facility_record import FacilityRecordValue
from app.schemas.source_config import (
    HealthResponse,
    JobStatusResponse,
    ReconcileSummaryResponse,
    RefreshAcceptedResponse,
    SourceConfigPayload,
)

__all__ = [
    "FacilityRecordValue",
    "HealthResponse",
    "JobStatusResponse",
    "ReconcileSummaryResponse",
    "RefreshAcceptedResponse",
    "SourceConfigPayload",
]
