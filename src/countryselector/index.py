"""Folding of raw subdivision groups into the country -> subdivision index."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from .countries import country_index_by_code
from .models import Country, RawSubdivisionGroup, Subdivision, SubdivisionIndex

_LOGGER = logging.getLogger("countryselector.index")


def build_index(
    groups: Iterable[RawSubdivisionGroup],
    countries: Sequence[Country],
) -> SubdivisionIndex:
    """Build the subdivision index from decoded groups.

    Only the first subset of each group is used. Its entries are appended to
    the owner's list in source order and its type label overwrites any label
    recorded earlier for the same owner. Groups without subsets are skipped.
    A group whose code matches no country is kept under the `None` owner and
    its code is reported in `unresolved_codes`.
    """
    subdivisions: dict[Country | None, list[Subdivision]] = {}
    labels: dict[Country | None, str] = {}
    unresolved: list[str] = []
    by_code = country_index_by_code(countries)

    for group in groups:
        if not group.subsets:
            continue

        country = by_code.get(group.code)
        if country is None:
            _LOGGER.warning("No country found for subdivision group '%s'", group.code)
            unresolved.append(group.code)

        subset = group.subsets[0]
        if len(group.subsets) > 1:
            _LOGGER.debug(
                "Ignoring %d extra subsets for '%s'", len(group.subsets) - 1, group.code
            )

        bucket = subdivisions.setdefault(country, [])
        for entry in subset.entries:
            bucket.append(Subdivision(name=entry.name, code=entry.code, country=country))
        labels[country] = subset.subdivision_type

    return SubdivisionIndex(
        subdivisions={owner: tuple(items) for owner, items in subdivisions.items()},
        labels=labels,
        unresolved_codes=tuple(unresolved),
    )
