from __future__ import annotations

import json
from pathlib import Path

import pytest

from app.domain.errors import ConfigurationError
from app.domain.source_config import SourceConfig
from app.schemas.source_config import SourceConfigPayload
from app.sources.loader import load_source_configs, parse_source_configs

ENTRY = {
    "dhisUrl": "http://dhis.example.org/api/",
    "dhisPath": "sqlViews/abc123/data.json",
    "cronPattern": "0 */6 * * *",
}


def _write(tmp_path: Path, data: object) -> str:
    path = tmp_path / "sources.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_load_list_form(tmp_path: Path) -> None:
    sources = load_source_configs(config_path=_write(tmp_path, [ENTRY]))

    assert sources == [
        SourceConfig(
            base_url="http://dhis.example.org/api/",
            path="sqlViews/abc123/data.json",
            cron_pattern="0 */6 * * *",
        )
    ]


def test_load_sources_key_form(tmp_path: Path) -> None:
    entry = {**ENTRY, "cronTimezone": "Africa/Kampala"}
    sources = load_source_configs(config_path=_write(tmp_path, {"sources": [entry]}))

    assert len(sources) == 1
    assert sources[0].cron_timezone == "Africa/Kampala"


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_source_configs(config_path=str(tmp_path / "absent.json"))


def test_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "sources.json"
    path.write_text("[{not json", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_source_configs(config_path=str(path))


def test_bad_entry_rejects_whole_file() -> None:
    with pytest.raises(ConfigurationError, match="index 1"):
        parse_source_configs([ENTRY, {"dhisUrl": "http://x/"}])


def test_blank_field_rejected() -> None:
    with pytest.raises(ConfigurationError):
        parse_source_configs([{**ENTRY, "cronPattern": "   "}])


def test_non_list_rejected() -> None:
    with pytest.raises(ConfigurationError):
        parse_source_configs({"sources": "nope"})


def test_derived_url_path_and_namespace() -> None:
    source = parse_source_configs([ENTRY])[0]

    assert source.url == "http://dhis.example.org/api/sqlViews/abc123/data.json"
    assert source.route_path == "/sqlViews/abc123/data.json"
    assert source.namespace == "/api/sqlViews/abc123/data.json"


def test_payload_round_trips_aliases() -> None:
    source = parse_source_configs([ENTRY])[0]

    dumped = SourceConfigPayload.from_domain(source).model_dump(by_alias=True)

    assert dumped == {**ENTRY, "cronTimezone": None}
