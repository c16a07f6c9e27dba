"""Country list loading and lookup."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Callable, Iterable

from .errors import TransferError
from .models import Country, RawCountryRecord
from .observable import ObservableList, ObservableValue
from .reader import RecordReader, RecordShape

_LOGGER = logging.getLogger("countryselector.countries")

# Element name in the ISO 3166 XML file. YAML datasets are a bare list or keep it under this key.
COUNTRY_SHAPE: RecordShape[RawCountryRecord] = RecordShape(
    name="iso_3166_entry",
    decode=RawCountryRecord.from_mapping,
)


def find_country_by_code(countries: Iterable[Country], code: str) -> Country | None:
    """Return the first country with `code`, or None when nothing matches."""
    wanted = code.strip().upper()
    for country in countries:
        if country.code == wanted:
            return country
    return None


def country_index_by_code(countries: Iterable[Country]) -> dict[str, Country]:
    """Map codes to countries; the first country wins when a code repeats."""
    index: dict[str, Country] = {}
    for country in countries:
        index.setdefault(country.code, country)
    return index


class CountryLoader:
    """First pipeline stage: stream the country dataset into the live collection.

    `load_countries` resolves the resource before touching any state, so a
    missing dataset raises `ConfigurationError` to the caller with the
    progress flag untouched. Once the whole stream is consumed `on_loaded`
    runs; a `TransferError` is logged and handed to `on_failed` instead.
    """

    def __init__(
        self,
        reader: RecordReader,
        resource_id: str,
        countries: ObservableList[Country],
        progress: ObservableValue[bool],
        *,
        on_loaded: Callable[[], object] | None = None,
        on_failed: Callable[[TransferError], object] | None = None,
    ) -> None:
        self.resource_id = resource_id
        self._reader = reader
        self._countries = countries
        self._progress = progress
        self._on_loaded = on_loaded
        self._on_failed = on_failed

    def load_countries(self) -> asyncio.Task[bool]:
        stream = self._reader.read(self.resource_id, COUNTRY_SHAPE)
        self._progress.set(True)
        return asyncio.get_running_loop().create_task(
            self._consume(stream), name="countryselector-load-countries"
        )

    async def _consume(self, stream: AsyncIterator[RawCountryRecord]) -> bool:
        seen = {country.code for country in self._countries}
        duplicates = 0
        try:
            async for record in stream:
                if record.code in seen:
                    duplicates += 1
                    _LOGGER.warning("Skipping duplicate country code '%s'", record.code)
                    continue
                seen.add(record.code)
                self._countries.append(record.to_country())
        except TransferError as exc:
            _LOGGER.error("A problem was detected while loading the countries: %s", exc)
            if self._on_failed is not None:
                self._on_failed(exc)
            return False

        _LOGGER.info(
            "Loaded %d countries from %s (%d duplicates skipped)",
            len(self._countries),
            self.resource_id,
            duplicates,
        )
        if self._on_loaded is not None:
            self._on_loaded()
        return True
