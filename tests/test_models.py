import pytest

from countryselector.models import (
    Country,
    LoadState,
    RawCountryRecord,
    RawSubdivisionGroup,
    SubdivisionIndex,
)


def test_country_equality_and_hash_use_code_only():
    a = Country(code="US", name="United States")
    b = Country(code="US", name="USA")
    assert a == b
    assert hash(a) == hash(b)
    assert len({a, b}) == 1
    assert a != Country(code="CA", name="United States")


def test_raw_country_record_accepts_xml_attribute_names():
    record = RawCountryRecord.from_mapping({"alpha_2_code": "ad", "alpha_3_code": "AND", "name": "Andorra"})
    assert record == RawCountryRecord(code="AD", name="Andorra")
    assert record.to_country() == Country(code="AD", name="Andorra")


def test_raw_country_record_rejects_missing_name():
    with pytest.raises(ValueError, match="name"):
        RawCountryRecord.from_mapping({"code": "US"})


def test_subdivision_group_from_yaml_layout():
    group = RawSubdivisionGroup.from_mapping(
        {
            "code": "us",
            "subsets": [
                {"type": "State", "entries": [{"code": "US-CA", "name": "California"}]},
                {"type": "District", "entries": [{"code": "US-DC", "name": "District of Columbia"}]},
            ],
        }
    )
    assert group.code == "US"
    assert [subset.subdivision_type for subset in group.subsets] == ["State", "District"]
    assert group.subsets[0].entries[0].name == "California"


def test_subdivision_group_from_xml_layout():
    group = RawSubdivisionGroup.from_mapping(
        {
            "code": "AD",
            "iso_3166_subset": [
                {
                    "type": "Parish",
                    "iso_3166_2_entry": [
                        {"code": "AD-07", "name": "Andorra la Vella"},
                        {"code": "AD-02", "name": "Canillo"},
                    ],
                }
            ],
        }
    )
    assert [entry.code for entry in group.subsets[0].entries] == ["AD-07", "AD-02"]


def test_subdivision_group_without_subsets():
    group = RawSubdivisionGroup.from_mapping({"code": "MC"})
    assert group.subsets == ()


def test_subdivision_group_rejects_non_list_subsets():
    with pytest.raises(ValueError, match="subsets"):
        RawSubdivisionGroup.from_mapping({"code": "US", "subsets": "State"})


def test_empty_index_lookups():
    index = SubdivisionIndex.empty()
    us = Country(code="US", name="United States")
    assert index.subdivisions_of(us) == ()
    assert index.label_of(us) is None
    assert index.subdivisions_of(None) == ()
    assert index.subdivision_count == 0


def test_load_state_terminal():
    assert LoadState.READY.terminal
    assert LoadState.FAILED.terminal
    assert not LoadState.LOADING_COUNTRIES.terminal
