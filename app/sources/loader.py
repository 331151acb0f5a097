"""
JSON loader for the startup source configuration.

Accepted file shapes::

    [{"dhisUrl": ..., "dhisPath": ..., "cronPattern": ..., "cronTimezone": ...}]
    {"sources": [ ...same entries... ]}
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from app.domain.errors import ConfigurationError
from app.domain.source_config import SourceConfig
from app.schemas.source_config import SourceConfigPayload


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def resolve_config_path(raw_path: str) -> Path:
    candidate = Path(raw_path)
    if candidate.is_absolute():
        return candidate
    return (_project_root() / candidate).resolve()


def load_source_configs(*, config_path: str) -> list[SourceConfig]:
    """
    Load and validate source configurations from a JSON file.

    Raises FileNotFoundError for a missing file and ConfigurationError for
    malformed content; a single bad entry rejects the whole file.
    """

    path = resolve_config_path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Source config file not found: {path}")

    try:
        raw_data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Source config file {path} is not valid JSON: {exc}") from exc

    return parse_source_configs(raw_data)


def parse_source_configs(raw_data: object) -> list[SourceConfig]:
    entries = raw_data.get("sources", []) if isinstance(raw_data, dict) else raw_data
    if not isinstance(entries, list):
        raise ConfigurationError("Invalid source config: expected a list of sources.")

    parsed: list[SourceConfig] = []
    for index, entry in enumerate(entries):
        try:
            payload = SourceConfigPayload.model_validate(entry)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid source config entry at index {index}: {exc}") from exc
        parsed.append(payload.to_domain())
    return parsed
