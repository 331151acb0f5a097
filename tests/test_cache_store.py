"""
tests/test_cache_store.py

Both cache backends against the same contract. The SQLAlchemy store runs on
an in-memory SQLite engine shared across sessions through a static pool.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from sqlalchemy import Text, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401
from app.cache.base import CacheStore
from app.cache.memory_store import MemoryCacheStore
from app.cache.sqlalchemy_store import SQLAlchemyCacheStore
from app.domain.errors import CacheWriteError
from app.domain.source_config import CacheRecord
from db.base import Base
from db.models.cache_entry import CacheEntry
from db.session import build_session_factory

NAMESPACE = "/api/sqlViews/abc123/data.json"


@pytest.fixture()
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture(params=["memory", "sqlalchemy"])
def store(request: pytest.FixtureRequest) -> CacheStore:
    if request.param == "memory":
        return MemoryCacheStore()
    engine = request.getfixturevalue("sqlite_engine")
    return SQLAlchemyCacheStore(build_session_factory(engine))


def _records(**values: str) -> list[CacheRecord]:
    return [CacheRecord(key=key, value=value) for key, value in values.items()]


class TestCacheStoreContract:
    def test_batch_put_then_get(self, store: CacheStore) -> None:
        namespace = store.namespace(NAMESPACE)
        namespace.batch_put(_records(F002='{"b":1}', F001='{"a":1}'))

        assert namespace.get("F001") == '{"a":1}'
        assert namespace.keys() == ["F001", "F002"]

    def test_batch_put_upserts(self, store: CacheStore) -> None:
        namespace = store.namespace(NAMESPACE)
        namespace.batch_put(_records(F001="old", F002="kept"))
        namespace.batch_put(_records(F001="new"))

        assert namespace.get("F001") == "new"
        assert namespace.get("F002") == "kept"

    def test_later_duplicate_in_batch_wins(self, store: CacheStore) -> None:
        namespace = store.namespace(NAMESPACE)
        namespace.batch_put([CacheRecord(key="F001", value="first"), CacheRecord(key="F001", value="second")])

        assert namespace.get("F001") == "second"
        assert namespace.keys() == ["F001"]

    def test_replace_prunes_missing_keys(self, store: CacheStore) -> None:
        namespace = store.namespace(NAMESPACE)
        namespace.batch_put(_records(F001="a", F002="b"))

        namespace.replace(_records(F002="b2", F003="c"))

        assert namespace.keys() == ["F002", "F003"]
        assert namespace.get("F001") is None
        assert namespace.get("F002") == "b2"

    def test_missing_key_returns_none(self, store: CacheStore) -> None:
        assert store.namespace(NAMESPACE).get("NOPE") is None

    def test_clear(self, store: CacheStore) -> None:
        namespace = store.namespace(NAMESPACE)
        namespace.batch_put(_records(F001="a"))

        namespace.clear()

        assert namespace.keys() == []
        assert store.namespaces() == []

    def test_namespaces_are_isolated(self, store: CacheStore) -> None:
        store.namespace("/a").batch_put(_records(F001="from-a"))
        store.namespace("/b").batch_put(_records(F001="from-b"))

        store.namespace("/a").replace([])

        assert store.namespace("/a").get("F001") is None
        assert store.namespace("/b").get("F001") == "from-b"
        assert store.namespaces() == ["/b"]

    def test_namespaces_sorted(self, store: CacheStore) -> None:
        store.namespace("/z").batch_put(_records(K="v"))
        store.namespace("/a").batch_put(_records(K="v"))

        assert store.namespaces() == ["/a", "/z"]

    def test_long_codes_are_stored(self, store: CacheStore) -> None:
        code = "F" * 400
        namespace = store.namespace(NAMESPACE)

        namespace.replace(_records(**{code: "long", "F001": "short"}))

        assert namespace.get(code) == "long"
        assert namespace.get("F001") == "short"


def test_cache_key_column_is_unbounded() -> None:
    key_type = CacheEntry.__table__.c.key.type
    assert isinstance(key_type, Text)
    assert key_type.length is None


class TestSQLAlchemyFailures:
    def test_write_failure_raises_cache_write_error(self, sqlite_engine: Engine) -> None:
        store = SQLAlchemyCacheStore(build_session_factory(sqlite_engine))
        Base.metadata.drop_all(sqlite_engine)

        with pytest.raises(CacheWriteError):
            store.namespace(NAMESPACE).replace(_records(F001="a"))

    def test_failed_replace_keeps_previous_contents(self, sqlite_engine: Engine) -> None:
        store = SQLAlchemyCacheStore(build_session_factory(sqlite_engine))
        namespace = store.namespace(NAMESPACE)
        namespace.batch_put(_records(F001="a"))

        # A value of None violates NOT NULL after the delete has already run.
        with pytest.raises(CacheWriteError):
            namespace.replace([CacheRecord(key="F002", value=None)])  # type: ignore[arg-type]

        assert namespace.keys() == ["F001"]
