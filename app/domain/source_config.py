"""
app/domain/source_config.py

Domain models for configured remote sources and the cache records built
from their tables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urljoin, urlparse


def normalize_route_path(path: str) -> str:
    """
    Return ``path`` with exactly one leading slash and no trailing slash.
    """

    stripped = path.strip().strip("/")
    return f"/{stripped}"


@dataclass(frozen=True)
class SourceConfig:
    """
    One configured remote table to poll on a cron schedule.

    Identity is the resolved ``url``: two entries with the same URL are the
    same source even if their schedule differs.
    """

    base_url: str
    path: str
    cron_pattern: str
    cron_timezone: str | None = None

    @property
    def url(self) -> str:
        return urljoin(self.base_url, self.path)

    @property
    def route_path(self) -> str:
        return normalize_route_path(self.path)

    @property
    def namespace(self) -> str:
        return namespace_for_url(self.url)


def namespace_for_url(url: str) -> str:
    """
    Cache namespace for a source URL: the URL's path component.
    """

    return urlparse(url).path or "/"


@dataclass(frozen=True)
class ListGrid:
    """
    Titled table returned by a remote source.
    """

    title: str
    headers: list[str]
    rows: list[Any] = field(default_factory=list)


@dataclass(frozen=True)
class CacheRecord:
    """
    One serialized facility row stored under its facility code.
    """

    key: str
    value: str


@dataclass(frozen=True)
class RefreshSummary:
    """
    Outcome of one fetch-transform-store run.
    """

    url: str
    namespace: str
    status: str
    records_written: int = 0
    skipped_rows: int = 0


@dataclass(frozen=True)
class ReconcileSummary:
    """
    Source URLs touched by one reconciliation.
    """

    added: list[str] = field(default_factory=list)
    rescheduled: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
