"""
app/domain/errors.py

Exception hierarchy for source synchronization and cache publication.
"""

from __future__ import annotations


class FacilityCacheError(Exception):
    """Base exception for facility cache failures."""


class TransientFetchError(FacilityCacheError):
    """
    Raised when a remote source cannot be fetched or returned an unusable
    response. The next scheduled firing tries again.
    """

    def __init__(self, message: str, *, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class MalformedRowError(FacilityCacheError):
    """Raised when a table row carries no facility code."""


class CacheWriteError(FacilityCacheError):
    """Raised when a cache namespace write fails."""


class ConfigurationError(FacilityCacheError):
    """Raised when a configuration list cannot be accepted."""


class DuplicateJobError(ConfigurationError):
    """Raised when a job is added for a URL that already has one."""
