"""
app/connectors/list_grid_connector.py

Connector for DHIS2-style SQL view tables (``listGrid`` payloads).
"""

from __future__ import annotations

from typing import Any

from app.connectors.base import BaseConnector
from app.domain.errors import TransientFetchError
from app.domain.source_config import ListGrid

# Since DHIS2 2.30 SQL views are paginated unless asked otherwise.
FULL_TABLE_PARAMS = {"paging": "false"}


class ListGridConnector(BaseConnector):
    """
    Fetch the complete, unpaginated table published at a source URL.
    """

    def fetch_table(self, url: str) -> ListGrid:
        payload = self._request_json(url=url, params=FULL_TABLE_PARAMS)
        return self.parse_list_grid(payload, url=url)

    @staticmethod
    def parse_list_grid(payload: Any, *, url: str) -> ListGrid:
        grid = payload.get("listGrid") if isinstance(payload, dict) else None
        if not isinstance(grid, dict):
            raise TransientFetchError(f"Response from {url} has no listGrid table.", url=url)

        headers = grid.get("headers") or []
        rows = grid.get("rows") or []
        if not isinstance(headers, list) or not isinstance(rows, list):
            raise TransientFetchError(f"Response from {url} has a malformed listGrid table.", url=url)

        title = grid.get("title")
        return ListGrid(
            title="" if title is None else str(title),
            headers=list(headers),
            rows=list(rows),
        )
