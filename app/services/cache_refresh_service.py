"""
app/services/cache_refresh_service.py

Fetch-transform-store pipeline: pull one source table and republish every
row as a cache record keyed by facility code.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from app.cache.base import CacheStore
from app.connectors.list_grid_connector import ListGridConnector
from app.domain.errors import CacheWriteError, MalformedRowError, TransientFetchError
from app.domain.source_config import CacheRecord, ListGrid, RefreshSummary, namespace_for_url
from app.logging_utils import log_event
from app.schemas.facility_record import FacilityRecordValue

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_FETCH_FAILED = "fetch_failed"
STATUS_STORE_FAILED = "store_failed"
STATUS_SKIPPED = "skipped"


class CacheRefreshService:
    """
    Runs ``refresh(url)`` for scheduled jobs and immediate triggers.

    Runs for different URLs may overlap; a run for a URL that is already
    being refreshed is skipped. Nothing raised here reaches the scheduler.
    """

    def __init__(self, *, connector: ListGridConnector, cache_store: CacheStore) -> None:
        self._connector = connector
        self._cache_store = cache_store
        self._in_flight: set[str] = set()
        self._in_flight_lock = threading.Lock()

    def refresh(self, url: str) -> RefreshSummary:
        namespace = namespace_for_url(url)
        if not self._claim(url):
            log_event(logger, logging.INFO, "cache_refresh_skipped", url=url, reason="in_flight")
            return RefreshSummary(url=url, namespace=namespace, status=STATUS_SKIPPED)

        try:
            return self._run(url, namespace)
        finally:
            self._release(url)

    def _run(self, url: str, namespace: str) -> RefreshSummary:
        log_event(
            logger,
            logging.INFO,
            "cache_refresh_started",
            url=url,
            namespace=namespace,
            message="populating cache",
        )

        try:
            table = self._connector.fetch_table(url)
        except TransientFetchError as exc:
            log_event(
                logger,
                logging.ERROR,
                "cache_refresh_fetch_failed",
                url=url,
                status_code=exc.status_code,
                error=str(exc),
            )
            return RefreshSummary(url=url, namespace=namespace, status=STATUS_FETCH_FAILED)

        records, skipped_rows = build_cache_records(table)

        try:
            self._cache_store.namespace(namespace).replace(records)
        except CacheWriteError as exc:
            log_event(
                logger,
                logging.ERROR,
                "cache_refresh_store_failed",
                url=url,
                namespace=namespace,
                error=str(exc),
            )
            return RefreshSummary(
                url=url,
                namespace=namespace,
                status=STATUS_STORE_FAILED,
                skipped_rows=skipped_rows,
            )

        log_event(
            logger,
            logging.INFO,
            "cache_refresh_finished",
            url=url,
            message="finished populating cache",
            namespace=namespace,
            records=len(records),
            skipped_rows=skipped_rows,
        )
        return RefreshSummary(
            url=url,
            namespace=namespace,
            status=STATUS_OK,
            records_written=len(records),
            skipped_rows=skipped_rows,
        )

    def _claim(self, url: str) -> bool:
        with self._in_flight_lock:
            if url in self._in_flight:
                return False
            self._in_flight.add(url)
            return True

    def _release(self, url: str) -> None:
        with self._in_flight_lock:
            self._in_flight.discard(url)


def build_cache_records(table: ListGrid) -> tuple[list[CacheRecord], int]:
    """
    Serialize every keyed row of ``table``; rows without a facility code are
    logged and counted, never fatal.
    """

    records: list[CacheRecord] = []
    skipped = 0
    for index, row in enumerate(table.rows):
        try:
            key = facility_code(row)
        except MalformedRowError as exc:
            skipped += 1
            log_event(logger, logging.ERROR, "facility_missing_code", row_index=index, row=row, error=str(exc))
            continue
        value = FacilityRecordValue.from_row(title=table.title, headers=table.headers, row=row)
        records.append(CacheRecord(key=key, value=value.model_dump_json()))
    return records, skipped


def facility_code(row: Any) -> str:
    """
    Return the facility code held in the first cell of ``row``.
    """

    if not isinstance(row, list) or not row:
        raise MalformedRowError("Row is empty or not a list.")
    first = row[0]
    code = "" if first is None else str(first)
    # Codes are stored verbatim; a blank cell still counts as missing.
    if not code.strip():
        raise MalformedRowError("Row has no facility code.")
    return code
