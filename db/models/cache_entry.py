"""
db/models/cache_entry.py

Namespaced facility cache entries, one row per (namespace, facility code).
"""

from __future__ import annotations

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class CacheEntry(Base, TimestampMixin):
    __tablename__ = "cache_entries"

    namespace: Mapped[str] = mapped_column(
        String(512),
        primary_key=True,
        comment="URL path of the source that produced the entry",
    )
    key: Mapped[str] = mapped_column(
        Text,
        primary_key=True,
        comment="Facility code",
    )
    value: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Serialized facility record JSON",
    )

    __table_args__ = (
        Index("ix_cache_entries_namespace", "namespace"),
    )
