import pytest

from conftest import US_COUNTRIES, US_GROUPS, StubReader
from countryselector.countries import CountryLoader, country_index_by_code, find_country_by_code
from countryselector.errors import ConfigurationError
from countryselector.models import Country
from countryselector.observable import ObservableList, ObservableValue
from countryselector.selection import SelectionStore
from countryselector.subdivisions import SubdivisionLoader


def test_find_country_by_code_first_match():
    countries = [Country("US", "United States"), Country("CA", "Canada")]
    assert find_country_by_code(countries, " ca ").name == "Canada"
    assert find_country_by_code(countries, "ZZ") is None
    assert set(country_index_by_code(countries)) == {"US", "CA"}


@pytest.mark.asyncio
async def test_country_loader_runs_continuation_on_success():
    countries: ObservableList[Country] = ObservableList()
    progress = ObservableValue(False)
    continued = []
    loader = CountryLoader(
        StubReader({"countries": US_COUNTRIES}),
        "countries",
        countries,
        progress,
        on_loaded=lambda: continued.append(len(countries)),
    )

    task = loader.load_countries()
    assert progress.value is True
    assert await task is True
    assert continued == [1]


@pytest.mark.asyncio
async def test_country_loader_reports_failure_without_continuation():
    failures = []
    continued = []
    loader = CountryLoader(
        StubReader({"countries": US_COUNTRIES}, fail_at={"countries": 0}),
        "countries",
        ObservableList(),
        ObservableValue(False),
        on_loaded=lambda: continued.append(True),
        on_failed=failures.append,
    )
    assert await loader.load_countries() is False
    assert continued == []
    assert len(failures) == 1


def test_country_loader_missing_resource_is_synchronous():
    progress = ObservableValue(False)
    loader = CountryLoader(StubReader({}), "countries", ObservableList(), progress)
    with pytest.raises(ConfigurationError):
        loader.load_countries()
    assert progress.value is False


@pytest.mark.asyncio
async def test_subdivision_loader_installs_index_and_clears_progress():
    store = SelectionStore()
    store.countries.append(Country("US", "United States"))
    store.progress.set(True)
    installed = []
    loader = SubdivisionLoader(
        StubReader({"subdivisions": US_GROUPS}),
        "subdivisions",
        store,
        on_loaded=installed.append,
    )

    assert await loader.load_subdivisions() is True
    assert store.progress.value is False
    assert installed == [store.index]
    assert store.index.label_of(Country("US", "United States")) == "State"


@pytest.mark.asyncio
async def test_subdivision_loader_failure_leaves_index_untouched():
    store = SelectionStore()
    store.progress.set(True)
    before = store.index
    failures = []
    loader = SubdivisionLoader(
        StubReader({"subdivisions": US_GROUPS}, fail_at={"subdivisions": 0}),
        "subdivisions",
        store,
        on_failed=failures.append,
    )
    assert await loader.load_subdivisions() is False
    assert store.index is before
    assert store.progress.value is True
    assert len(failures) == 1


def test_country_index_by_code_keeps_first_country():
    first = Country("US", "United States")
    index = country_index_by_code([first, Country("US", "USA"), Country("CA", "Canada")])
    assert index["US"].name == "United States"
    assert list(index) == ["US", "CA"]
