"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

CACHE_BACKEND_MEMORY = "memory"
CACHE_BACKEND_DATABASE = "database"
_ALLOWED_CACHE_BACKENDS = {CACHE_BACKEND_MEMORY, CACHE_BACKEND_DATABASE}


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _require_cache_backend() -> str:
    """
    Read and validate CACHE_BACKEND. Unknown values raise RuntimeError.
    """

    raw = _get_str_env("CACHE_BACKEND", CACHE_BACKEND_MEMORY)
    backend = raw.lower()
    if backend not in _ALLOWED_CACHE_BACKENDS:
        raise RuntimeError(
            f"CACHE_BACKEND '{raw}' is not valid. "
            f"Allowed values: {sorted(_ALLOWED_CACHE_BACKENDS)}."
        )
    return backend


@dataclass(frozen=True)
class ServiceSettings:
    """
    Top-level runtime settings for the facility cache service.
    """

    cache_backend: str = CACHE_BACKEND_MEMORY
    sources_config_path: str | None = None
    scheduler_timezone: str = "UTC"


@dataclass(frozen=True)
class SourceHTTPSettings:
    """
    Outbound HTTP behavior for remote table sources.
    """

    timeout_seconds: float = 30.0
    user_agent: str = "facility-cache-sync/1.0"


@lru_cache(maxsize=1)
def get_service_settings() -> ServiceSettings:
    """
    Return cached service settings.

    Raises RuntimeError if CACHE_BACKEND holds an unsupported value.
    """

    return ServiceSettings(
        cache_backend=_require_cache_backend(),
        sources_config_path=_get_optional_str_env("SOURCES_CONFIG_PATH"),
        scheduler_timezone=_get_str_env("SCHEDULER_TIMEZONE", "UTC"),
    )


@lru_cache(maxsize=1)
def get_source_http_settings() -> SourceHTTPSettings:
    """
    Return remote source HTTP settings from environment variables.
    """

    return SourceHTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("SOURCE_HTTP_TIMEOUT_SECONDS", 30.0)),
        user_agent=_get_str_env("SOURCE_HTTP_USER_AGENT", "facility-cache-sync/1.0"),
    )
