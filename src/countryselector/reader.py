"""Record readers turning a dataset resource into decoded records."""

from __future__ import annotations

import asyncio
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Generic, Mapping, Protocol, TypeVar
from urllib.parse import urlparse

import requests
import yaml

from .errors import ConfigurationError, TransferError

T = TypeVar("T")

_LOGGER = logging.getLogger("countryselector.reader")

_URL_SCHEMES = {"http", "https"}
# Records decoded between yields back to the event loop.
_YIELD_EVERY = 50


@dataclass(frozen=True, slots=True)
class RecordShape(Generic[T]):
    """Name of the record collection/element plus its decoding function."""

    name: str
    decode: Callable[[Mapping[str, Any]], T]


class RecordReader(Protocol):
    def locate(self, resource_id: str) -> str:
        """Resolve a resource identifier, raising `ConfigurationError` if it does not exist."""
        ...

    def read(self, resource_id: str, shape: RecordShape[T]) -> AsyncIterator[T]:
        """Locate synchronously, then stream decoded records asynchronously."""
        ...


def is_url(resource_id: str) -> bool:
    return urlparse(resource_id).scheme.lower() in _URL_SCHEMES


class _BaseRecordReader:
    def __init__(
        self,
        *,
        base_dir: Path | None = None,
        request_timeout_s: float = 30.0,
        user_agent: str = "countryselector",
        session: requests.Session | None = None,
    ) -> None:
        self.base_dir = base_dir
        self.request_timeout_s = request_timeout_s
        self._session = session
        self._user_agent = user_agent

    def locate(self, resource_id: str) -> str:
        if not resource_id or not resource_id.strip():
            raise ConfigurationError("Empty resource identifier")
        if is_url(resource_id):
            # Remote existence is only known once fetched; HTTP errors surface as TransferError.
            return resource_id
        path = Path(resource_id).expanduser()
        if not path.is_absolute() and self.base_dir is not None:
            path = self.base_dir / path
        if not path.is_file():
            raise ConfigurationError(f"Resource not found: {path}")
        return str(path.resolve())

    def read(self, resource_id: str, shape: RecordShape[T]) -> AsyncIterator[T]:
        location = self.locate(resource_id)
        return self._stream(resource_id, location, shape)

    async def _stream(self, resource_id: str, location: str, shape: RecordShape[T]) -> AsyncIterator[T]:
        _LOGGER.debug("Reading '%s' records from %s", shape.name, location)
        try:
            payload = await asyncio.to_thread(self._fetch, location)
            raw_records = await asyncio.to_thread(self._parse, payload, shape.name)
        except (OSError, requests.RequestException, yaml.YAMLError, ET.ParseError, ValueError) as exc:
            raise TransferError(resource_id, str(exc)) from exc

        for idx, raw in enumerate(raw_records):
            try:
                record = shape.decode(raw)
            except ValueError as exc:
                raise TransferError(resource_id, f"record {idx}: {exc}") from exc
            yield record
            if (idx + 1) % _YIELD_EVERY == 0:
                await asyncio.sleep(0)

    def _fetch(self, location: str) -> bytes:
        if not is_url(location):
            return Path(location).read_bytes()
        response = self._http_session().get(location, timeout=self.request_timeout_s)
        response.raise_for_status()
        return response.content

    def _http_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({"User-Agent": self._user_agent})
        return self._session

    def _parse(self, payload: bytes, name: str) -> list[Mapping[str, Any]]:
        raise NotImplementedError


class YamlRecordReader(_BaseRecordReader):
    """Reads a YAML document holding a list of records.

    The list is either the whole document or the value stored under the
    record shape's name.
    """

    def _parse(self, payload: bytes, name: str) -> list[Mapping[str, Any]]:
        raw = yaml.safe_load(payload)
        if isinstance(raw, Mapping):
            if name not in raw:
                raise ValueError(f"Missing '{name}' list in YAML document")
            raw = raw[name]
        if not isinstance(raw, list):
            raise ValueError(f"Expected list of '{name}' records")
        for idx, item in enumerate(raw):
            if not isinstance(item, Mapping):
                raise ValueError(f"Expected mapping at {name}[{idx}]")
        return raw


class XmlRecordReader(_BaseRecordReader):
    """Reads every element named like the record shape from an XML document.

    Each element becomes a mapping of its attributes plus one list per child
    tag, e.g. `<iso_3166_country code="AD"><iso_3166_subset .../>` turns into
    `{"code": "AD", "iso_3166_subset": [{...}]}`.
    """

    def _parse(self, payload: bytes, name: str) -> list[Mapping[str, Any]]:
        root = ET.fromstring(payload)
        return [_element_to_mapping(element) for element in root.iter(name)]


def _element_to_mapping(element: ET.Element) -> dict[str, Any]:
    out: dict[str, Any] = dict(element.attrib)
    for child in element:
        out.setdefault(child.tag, []).append(_element_to_mapping(child))
    return out


_READERS: dict[str, type[_BaseRecordReader]] = {
    "yaml": YamlRecordReader,
    "xml": XmlRecordReader,
}


def create_reader(
    fmt: str,
    *,
    base_dir: Path | None = None,
    request_timeout_s: float = 30.0,
    user_agent: str = "countryselector",
) -> RecordReader:
    reader_cls = _READERS.get(fmt.casefold())
    if reader_cls is None:
        raise ConfigurationError(
            f"Unsupported resource format '{fmt}'; expected one of: " + ", ".join(sorted(_READERS))
        )
    return reader_cls(
        base_dir=base_dir,
        request_timeout_s=request_timeout_s,
        user_agent=user_agent,
    )
