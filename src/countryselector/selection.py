"""Selection state derived from the subdivision index."""

from __future__ import annotations

import logging

from .models import Country, Subdivision, SubdivisionIndex
from .observable import ObservableList, ObservableValue, ReadOnlyList, ReadOnlyValue

_LOGGER = logging.getLogger("countryselector.selection")


class SelectionStore:
    """Holds the selected country and the state derived from it.

    The country collection and the index are written only by the load
    pipeline. `set_country` reads them and writes the derived fields.
    """

    def __init__(self) -> None:
        self.countries: ObservableList[Country] = ObservableList()
        self.progress: ObservableValue[bool] = ObservableValue(False)
        self._subdivisions: ObservableList[Subdivision] = ObservableList()
        self._label: ObservableValue[str | None] = ObservableValue(None)
        self._index = SubdivisionIndex.empty()
        self._selected: Country | None = None

    @property
    def index(self) -> SubdivisionIndex:
        return self._index

    @property
    def selected_country(self) -> Country | None:
        return self._selected

    def set_country(self, country: Country | None) -> None:
        self._selected = country
        if country is None:
            self._label.set(None)
            self._subdivisions.clear()
            return

        self._label.set(self._index.label_of(country))
        self._subdivisions.replace(self._index.subdivisions_of(country))
        _LOGGER.debug(
            "Selected %s: %d subdivisions", country.code, len(self._subdivisions)
        )

    def install_index(self, index: SubdivisionIndex) -> None:
        """Swap in a fully built index and refresh the current selection."""
        self._index = index
        self.set_country(self._selected)

    def available_countries(self) -> ReadOnlyList[Country]:
        return self.countries.read_only()

    def subdivisions(self) -> ReadOnlyList[Subdivision]:
        return self._subdivisions.read_only()

    def subdivision_label(self) -> ReadOnlyValue[str | None]:
        return self._label.read_only()

    def in_progress(self) -> ReadOnlyValue[bool]:
        return self.progress.read_only()
