"""
app/connectors/base.py

Shared HTTP mechanics for remote table sources.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from app.config import SourceHTTPSettings
from app.domain.errors import TransientFetchError

logger = logging.getLogger(__name__)


class BaseConnector:
    """
    Single-attempt JSON fetcher.

    Failures are never retried here: the caller's schedule is the retry
    policy. Every failure surfaces as ``TransientFetchError``.
    """

    def __init__(
        self,
        *,
        http_settings: SourceHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        self._session = session or requests.Session()
        self._timeout_seconds = http_settings.timeout_seconds
        self._headers = {
            "Accept": "application/json",
            "User-Agent": http_settings.user_agent,
        }

    def _request_json(
        self,
        *,
        url: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """
        GET ``url`` and return the parsed JSON body of a 200 response.
        """

        try:
            response = self._session.get(
                url,
                params=params,
                headers=self._headers,
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as exc:
            raise TransientFetchError(f"Request to {url} failed: {exc}", url=url) from exc

        if response.status_code != 200:
            raise TransientFetchError(
                f"Non-200 status code from {url}: {response.status_code}",
                url=url,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise TransientFetchError(f"Response from {url} was not valid JSON.", url=url) from exc
