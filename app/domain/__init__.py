"""
app/domain package marker.
"""

from app.domain.errors import (
    CacheWriteError,
    ConfigurationError,
    DuplicateJobError,
    FacilityCacheError,
    MalformedRowError,
    TransientFetchError,
)
from app.domain.source_config import (
    CacheRecord,
    ListGrid,
    ReconcileSummary,
    RefreshSummary,
    SourceConfig,
    namespace_for_url,
    normalize_route_path,
)

__all__ = [
    "CacheRecord",
    "CacheWriteError",
    "ConfigurationError",
    "DuplicateJobError",
    "FacilityCacheError",
    "ListGrid",
    "MalformedRowError",
    "ReconcileSummary",
    "RefreshSummary",
    "SourceConfig",
    "TransientFetchError",
    "namespace_for_url",
    "normalize_route_path",
]
