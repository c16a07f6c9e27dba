"""Subdivision dataset loading, second stage of the pipeline."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Callable

from .errors import TransferError
from .index import build_index
from .models import RawSubdivisionGroup, SubdivisionIndex
from .reader import RecordReader, RecordShape
from .selection import SelectionStore

_LOGGER = logging.getLogger("countryselector.subdivisions")

SUBDIVISION_SHAPE: RecordShape[RawSubdivisionGroup] = RecordShape(
    name="iso_3166_country",
    decode=RawSubdivisionGroup.from_mapping,
)


class SubdivisionLoader:
    """Streams subdivision groups into a private buffer, then installs the index.

    Must only be started after the country stage finished, since owners are
    resolved against the country collection held by `store`.
    """

    def __init__(
        self,
        reader: RecordReader,
        resource_id: str,
        store: SelectionStore,
        *,
        on_loaded: Callable[[SubdivisionIndex], object] | None = None,
        on_failed: Callable[[TransferError], object] | None = None,
    ) -> None:
        self.resource_id = resource_id
        self._reader = reader
        self._store = store
        self._on_loaded = on_loaded
        self._on_failed = on_failed

    def load_subdivisions(self) -> asyncio.Task[bool]:
        stream = self._reader.read(self.resource_id, SUBDIVISION_SHAPE)
        return asyncio.get_running_loop().create_task(
            self._consume(stream), name="countryselector-load-subdivisions"
        )

    async def _consume(self, stream: AsyncIterator[RawSubdivisionGroup]) -> bool:
        buffer: list[RawSubdivisionGroup] = []
        try:
            async for group in stream:
                buffer.append(group)
        except TransferError as exc:
            _LOGGER.error("A problem was detected while loading the subdivisions: %s", exc)
            if self._on_failed is not None:
                self._on_failed(exc)
            return False

        index = build_index(buffer, self._store.countries)
        self._store.install_index(index)
        self._store.progress.set(False)
        _LOGGER.info(
            "Indexed %d subdivisions for %d countries from %s",
            index.subdivision_count,
            len(index.subdivisions),
            self.resource_id,
        )
        if index.unresolved_codes:
            _LOGGER.warning(
                "%d subdivision groups reference unknown countries: %s",
                len(index.unresolved_codes),
                ", ".join(index.unresolved_codes),
            )
        if self._on_loaded is not None:
            self._on_loaded(index)
        return True
