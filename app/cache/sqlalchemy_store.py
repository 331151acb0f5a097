"""
SQLAlchemy-backed cache store.

Each write runs in its own session and transaction, so a batch is committed
as a whole or rolled back as a whole.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.cache.base import CacheNamespace, CacheStore
from app.domain.errors import CacheWriteError
from app.domain.source_config import CacheRecord
from db.models.cache_entry import CacheEntry

logger = logging.getLogger(__name__)


class SQLAlchemyCacheNamespace(CacheNamespace):
    def __init__(self, name: str, session_factory: sessionmaker[Session]) -> None:
        super().__init__(name)
        self._session_factory = session_factory

    def batch_put(self, records: Sequence[CacheRecord]) -> None:
        self._write(records, clear_first=False)

    def replace(self, records: Sequence[CacheRecord]) -> None:
        self._write(records, clear_first=True)

    def get(self, key: str) -> str | None:
        with self._session_factory() as session:
            entry = session.get(CacheEntry, (self.name, key))
            return entry.value if entry is not None else None

    def keys(self) -> list[str]:
        stmt = select(CacheEntry.key).where(CacheEntry.namespace == self.name).order_by(CacheEntry.key)
        with self._session_factory() as session:
            return list(session.scalars(stmt))

    def clear(self) -> None:
        self._write([], clear_first=True)

    def _write(self, records: Sequence[CacheRecord], *, clear_first: bool) -> None:
        # Later duplicates of a key win, matching dict semantics of the memory store.
        staged = {record.key: record.value for record in records}
        with self._session_factory() as session:
            try:
                if clear_first:
                    session.execute(delete(CacheEntry).where(CacheEntry.namespace == self.name))
                    session.add_all(
                        CacheEntry(namespace=self.name, key=key, value=value)
                        for key, value in staged.items()
                    )
                else:
                    for key, value in staged.items():
                        session.merge(CacheEntry(namespace=self.name, key=key, value=value))
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception(
                    "Cache namespace write failed namespace=%s records=%s",
                    self.name,
                    len(staged),
                )
                raise CacheWriteError(f"Failed to write cache namespace '{self.name}'.") from exc


class SQLAlchemyCacheStore(CacheStore):
    """
    Store records in the ``cache_entries`` table.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def namespace(self, name: str) -> SQLAlchemyCacheNamespace:
        return SQLAlchemyCacheNamespace(name, self._session_factory)

    def namespaces(self) -> list[str]:
        stmt = select(CacheEntry.namespace).distinct().order_by(CacheEntry.namespace)
        with self._session_factory() as session:
            return list(session.scalars(stmt))
