"""
app/schemas/facility_record.py

Serialized shape of one cached facility row.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class FacilityRecordValue(BaseModel):
    """
    Cached value for one facility code.

    Field names and order are consumed by downstream clients:
    ``title``, ``headers``, ``rows`` (a one-row table), ``width``, ``height``.
    """

    title: str
    headers: list[Any]
    rows: list[list[Any]]
    width: int = Field(..., ge=0)
    height: int = 1

    @classmethod
    def from_row(cls, *, title: str, headers: list[Any], row: list[Any]) -> FacilityRecordValue:
        return cls(title=title, headers=headers, rows=[row], width=len(headers), height=1)
