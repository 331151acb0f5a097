"""
app/schemas/source_config.py

Request and response schemas for source configuration and job status.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.domain.source_config import ReconcileSummary, SourceConfig


class SourceConfigPayload(BaseModel):
    """
    Wire form of one configured source.
    """

    model_config = ConfigDict(populate_by_name=True)

    dhis_url: str = Field(..., alias="dhisUrl", min_length=1)
    dhis_path: str = Field(..., alias="dhisPath", min_length=1)
    cron_pattern: str = Field(..., alias="cronPattern", min_length=1)
    cron_timezone: str | None = Field(default=None, alias="cronTimezone")

    @field_validator("dhis_url", "dhis_path", "cron_pattern")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped

    @field_validator("cron_timezone")
    @classmethod
    def _strip_optional(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    def to_domain(self) -> SourceConfig:
        return SourceConfig(
            base_url=self.dhis_url,
            path=self.dhis_path,
            cron_pattern=self.cron_pattern,
            cron_timezone=self.cron_timezone,
        )

    @classmethod
    def from_domain(cls, source: SourceConfig) -> SourceConfigPayload:
        return cls(
            dhis_url=source.base_url,
            dhis_path=source.path,
            cron_pattern=source.cron_pattern,
            cron_timezone=source.cron_timezone,
        )


class ReconcileSummaryResponse(BaseModel):
    added: list[str] = Field(default_factory=list)
    rescheduled: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, summary: ReconcileSummary) -> ReconcileSummaryResponse:
        return cls(
            added=list(summary.added),
            rescheduled=list(summary.rescheduled),
            removed=list(summary.removed),
        )


class JobStatusResponse(BaseModel):
    url: str
    route_path: str
    cron_pattern: str
    cron_timezone: str
    next_run_time: datetime | None = None


class RefreshAcceptedResponse(BaseModel):
    triggered: list[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str
    jobs: int = Field(..., ge=0)
    routes: int = Field(..., ge=0)
