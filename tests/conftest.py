"""Shared fixtures for country selector tests."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, AsyncIterator, Mapping

import pytest
import yaml

from countryselector.config import HttpConfig, LoggingConfig, ResourcesConfig, SelectorConfig
from countryselector.errors import ConfigurationError, TransferError
from countryselector.reader import RecordShape

US_COUNTRIES = [{"code": "US", "name": "United States"}]
US_GROUPS = [
    {
        "code": "US",
        "subsets": [
            {"type": "State", "entries": [{"code": "CA", "name": "California"}]},
        ],
    }
]


def make_config(countries: str, subdivisions: str, fmt: str = "yaml") -> SelectorConfig:
    return SelectorConfig(
        source_path=None,
        resources=ResourcesConfig(countries=countries, subdivisions=subdivisions, format=fmt),
        http=HttpConfig(),
        logging=LoggingConfig(),
    )


class StubReader:
    """In-memory reader; `fail_at` maps a resource to the record index that raises."""

    def __init__(
        self,
        records: Mapping[str, list[Mapping[str, Any]]],
        *,
        fail_at: Mapping[str, int] | None = None,
    ) -> None:
        self.records = dict(records)
        self.fail_at = dict(fail_at or {})
        self.calls: list[str] = []

    def locate(self, resource_id: str) -> str:
        if resource_id not in self.records:
            raise ConfigurationError(f"Resource not found: {resource_id}")
        return resource_id

    def read(self, resource_id: str, shape: RecordShape[Any]) -> AsyncIterator[Any]:
        self.locate(resource_id)
        self.calls.append(resource_id)
        return self._stream(resource_id, shape)

    async def _stream(self, resource_id: str, shape: RecordShape[Any]) -> AsyncIterator[Any]:
        for idx, raw in enumerate(self.records[resource_id]):
            if self.fail_at.get(resource_id) == idx:
                raise TransferError(resource_id, "connection reset")
            await asyncio.sleep(0)
            yield shape.decode(raw)
        if self.fail_at.get(resource_id) == len(self.records[resource_id]):
            raise TransferError(resource_id, "truncated stream")


@pytest.fixture
def stub_config() -> SelectorConfig:
    return make_config("countries", "subdivisions")


@pytest.fixture
def write_datasets(tmp_path: Path):
    """Write YAML datasets to disk and return a config pointing at them."""

    def _write(
        countries: list[Mapping[str, Any]],
        groups: list[Mapping[str, Any]],
    ) -> SelectorConfig:
        countries_path = tmp_path / "iso_3166.yaml"
        groups_path = tmp_path / "iso_3166_2.yaml"
        countries_path.write_text(yaml.safe_dump(countries, allow_unicode=True), encoding="utf-8")
        groups_path.write_text(yaml.safe_dump(groups, allow_unicode=True), encoding="utf-8")
        return make_config(str(countries_path), str(groups_path))

    return _write
