"""Country selector facade wiring the two-stage load pipeline to the selection store."""

from __future__ import annotations

import asyncio
import logging

from .config import SelectorConfig
from .countries import CountryLoader, find_country_by_code
from .errors import ConfigurationError, SelectorError, TransferError
from .models import Country, LoadState, Subdivision, SubdivisionIndex
from .observable import ObservableValue, ReadOnlyList, ReadOnlyValue
from .reader import RecordReader
from .selection import SelectionStore
from .subdivisions import SubdivisionLoader

_LOGGER = logging.getLogger("countryselector.selector")


class CountrySelector:
    """Loads countries, then their subdivisions, and exposes observable selection state.

    Typical use inside a running event loop::

        selector = CountrySelector()
        state = await selector.init()
        selector.set_country(selector.find_country("US"))
        selector.subdivisions()        # live, read-only
        selector.subdivision_label()   # e.g. "State"

    A transfer failure in either stage clears the progress flag, moves
    `state` to FAILED and publishes the exception on `error`.
    """

    def __init__(
        self,
        config: SelectorConfig | None = None,
        *,
        reader: RecordReader | None = None,
    ) -> None:
        self.config = config or SelectorConfig.default()
        self._reader = reader or self.config.create_reader()
        self._store = SelectionStore()
        self._state: ObservableValue[LoadState] = ObservableValue(LoadState.IDLE)
        self._error: ObservableValue[SelectorError | None] = ObservableValue(None)
        self._done: asyncio.Future[LoadState] | None = None
        self._tasks: dict[asyncio.Task[bool], str] = {}

        self._country_loader = CountryLoader(
            self._reader,
            self.config.resources.countries,
            self._store.countries,
            self._store.progress,
            on_loaded=self._start_subdivisions,
            on_failed=self._fail,
        )
        self._subdivision_loader = SubdivisionLoader(
            self._reader,
            self.config.resources.subdivisions,
            self._store,
            on_loaded=self._ready,
            on_failed=self._fail,
        )

    def init(self) -> asyncio.Future[LoadState]:
        """Start loading; the returned future resolves with READY or FAILED.

        Both resources are resolved first, so a missing dataset raises
        `ConfigurationError` here before any observable state changes.
        Calling `init` again returns the same future.
        """
        if self._done is not None:
            return self._done

        self._reader.locate(self.config.resources.countries)
        self._reader.locate(self.config.resources.subdivisions)

        self._done = asyncio.get_running_loop().create_future()
        self._watch(self._country_loader.load_countries(), self._country_loader.resource_id)
        self._state.set(LoadState.LOADING_COUNTRIES)
        return self._done

    def set_country(self, country: Country | None) -> None:
        self._store.set_country(country)

    def find_country(self, code: str) -> Country | None:
        return find_country_by_code(self._store.countries, code)

    def available_countries(self) -> ReadOnlyList[Country]:
        return self._store.available_countries()

    def subdivisions(self) -> ReadOnlyList[Subdivision]:
        return self._store.subdivisions()

    def subdivision_label(self) -> ReadOnlyValue[str | None]:
        return self._store.subdivision_label()

    def in_progress(self) -> ReadOnlyValue[bool]:
        return self._store.in_progress()

    def state(self) -> ReadOnlyValue[LoadState]:
        return self._state.read_only()

    def error(self) -> ReadOnlyValue[SelectorError | None]:
        return self._error.read_only()

    @property
    def selected_country(self) -> Country | None:
        return self._store.selected_country

    @property
    def index(self) -> SubdivisionIndex:
        return self._store.index

    @property
    def unresolved_codes(self) -> tuple[str, ...]:
        return self._store.index.unresolved_codes

    def _start_subdivisions(self) -> None:
        try:
            task = self._subdivision_loader.load_subdivisions()
        except ConfigurationError as exc:
            _LOGGER.error("Cannot start subdivision stage: %s", exc)
            self._abort(exc, exc)
            return
        self._watch(task, self._subdivision_loader.resource_id)
        self._state.set(LoadState.LOADING_SUBDIVISIONS)

    def _ready(self, index: SubdivisionIndex) -> None:
        self._finish(LoadState.READY)

    def _fail(self, exc: SelectorError) -> None:
        self._store.progress.set(False)
        self._error.set(exc)
        self._finish(LoadState.FAILED)

    def _finish(self, state: LoadState) -> None:
        self._state.set(state)
        if self._done is not None and not self._done.done():
            self._done.set_result(state)

    def _abort(self, exc: BaseException, error: SelectorError) -> None:
        """Move to FAILED and hand `exc` to whoever awaits `init()`."""
        if not self._state.value.terminal:
            self._store.progress.set(False)
            self._error.set(error)
            self._state.set(LoadState.FAILED)
        if self._done is not None and not self._done.done():
            self._done.set_exception(exc)

    def _watch(self, task: asyncio.Task[bool], resource_id: str) -> None:
        self._tasks[task] = resource_id
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task[bool]) -> None:
        resource_id = self._tasks.pop(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        _LOGGER.error("Load task %s crashed: %s", task.get_name(), exc)
        error = exc if isinstance(exc, SelectorError) else TransferError(resource_id, str(exc))
        self._abort(exc, error)
