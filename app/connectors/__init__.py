"""
app/connectors package marker.
"""

from app.connectors.base import BaseConnector
from app.connectors.list_grid_connector import FULL_TABLE_PARAMS, ListGridConnector

__all__ = [
    "BaseConnector",
    "FULL_TABLE_PARAMS",
    "ListGridConnector",
]
