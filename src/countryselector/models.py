"""Domain models shared across pipeline modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Sequence


def _require_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _first_present(data: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _mapping_list(value: Any, field_name: str) -> list[Mapping[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"Expected list for '{field_name}'")
    for idx, item in enumerate(value):
        if not isinstance(item, Mapping):
            raise ValueError(f"Expected mapping at {field_name}[{idx}]")
    return value


@dataclass(frozen=True, slots=True)
class Country:
    """A country identified by its code; equality and hashing use the code only."""

    code: str
    name: str = field(compare=False)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Subdivision:
    """Sub-region of a country. `country` is None when the owner could not be resolved."""

    name: str
    code: str
    country: Country | None


@dataclass(frozen=True, slots=True)
class RawCountryRecord:
    """One decoded country entry, before it is wrapped as a `Country`."""

    code: str
    name: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RawCountryRecord:
        code = _require_str(_first_present(data, ("code", "alpha_2_code")), "code")
        name = _require_str(data.get("name"), "name")
        return cls(code=code.upper(), name=name)

    def to_country(self) -> Country:
        return Country(code=self.code, name=self.name)


@dataclass(frozen=True, slots=True)
class RawSubdivisionEntry:
    code: str
    name: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RawSubdivisionEntry:
        return cls(
            code=_require_str(data.get("code"), "entries[].code"),
            name=_require_str(data.get("name"), "entries[].name"),
        )


@dataclass(frozen=True, slots=True)
class RawSubdivisionSubset:
    subdivision_type: str
    entries: tuple[RawSubdivisionEntry, ...] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RawSubdivisionSubset:
        raw_entries = _mapping_list(
            _first_present(data, ("entries", "iso_3166_2_entry")),
            "entries",
        )
        return cls(
            subdivision_type=_require_str(data.get("type"), "subsets[].type"),
            entries=tuple(RawSubdivisionEntry.from_mapping(item) for item in raw_entries),
        )


@dataclass(frozen=True, slots=True)
class RawSubdivisionGroup:
    """Decoded subdivision block of one country.

    Accepts both the YAML layout (`code`, `subsets`, `entries`) and the
    ISO 3166-2 XML layout (`iso_3166_subset`, `iso_3166_2_entry`).
    """

    code: str
    subsets: tuple[RawSubdivisionSubset, ...] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RawSubdivisionGroup:
        code = _require_str(data.get("code"), "code")
        raw_subsets = _mapping_list(
            _first_present(data, ("subsets", "iso_3166_subset")),
            "subsets",
        )
        return cls(
            code=code.upper(),
            subsets=tuple(RawSubdivisionSubset.from_mapping(item) for item in raw_subsets),
        )


class LoadState(str, Enum):
    IDLE = "idle"
    LOADING_COUNTRIES = "loading_countries"
    LOADING_SUBDIVISIONS = "loading_subdivisions"
    READY = "ready"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (LoadState.READY, LoadState.FAILED)


@dataclass(frozen=True, slots=True)
class SubdivisionIndex:
    """Country -> subdivisions and country -> subdivision-type label.

    The `None` key collects groups whose country code matched no known
    country; those codes are listed in `unresolved_codes`.
    """

    subdivisions: Mapping[Country | None, tuple[Subdivision, ...]] = field(default_factory=dict)
    labels: Mapping[Country | None, str] = field(default_factory=dict)
    unresolved_codes: tuple[str, ...] = ()

    @classmethod
    def empty(cls) -> SubdivisionIndex:
        return cls()

    def subdivisions_of(self, country: Country | None) -> tuple[Subdivision, ...]:
        return self.subdivisions.get(country, ())

    def label_of(self, country: Country | None) -> str | None:
        return self.labels.get(country)

    @property
    def subdivision_count(self) -> int:
        return sum(len(items) for items in self.subdivisions.values())
