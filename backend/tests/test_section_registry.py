import pytest

from medlegal.db.schemas import ClaimantDetails, ExpertDetails
from medlegal.services.section_registry import (
    SECTION_IDS,
    SECTIONS,
    get_section,
    get_section_by_api_path,
    is_present,
    section_payload,
)


def test_registry_order_is_fixed():
    assert SECTION_IDS == (
        "claimant", "accident", "physical", "psychological", "treatments",
        "lifestyle", "family", "work", "prognosis", "expert",
    )


def test_ids_api_paths_and_fields_are_unique():
    for attr in ("id", "api_path", "field"):
        values = [getattr(s, attr) for s in SECTIONS]
        assert len(values) == len(set(values))


def test_lookup_by_id_and_api_path():
    assert get_section("claimant").schema is ClaimantDetails
    assert get_section_by_api_path("expert-details").schema is ExpertDetails
    assert get_section_by_api_path("physical-injury").field == "physical_injury_details"


def test_unknown_lookup_raises_key_error():
    with pytest.raises(KeyError):
        get_section("nope")
    with pytest.raises(KeyError):
        get_section_by_api_path("claimant")


@pytest.mark.parametrize("value,expected", [
    (None, False),
    ("", False),
    ("   ", False),
    ([], False),
    ({}, False),
    (False, True),
    (0, True),
    ("x", True),
    (["a"], True),
])
def test_is_present(value, expected):
    assert is_present(value) is expected


def test_claimant_needs_name_and_date_of_birth():
    claimant = get_section("claimant")
    assert not claimant.is_complete({"full_name": "John Smith"})
    assert not claimant.is_complete({"full_name": "  ", "date_of_birth": "1985-04-12"})
    assert claimant.is_complete({"full_name": "John Smith", "date_of_birth": "1985-04-12"})


def test_any_answer_sections_count_false_as_answered():
    treatments = get_section("treatments")
    assert treatments.is_complete({"went_to_hospital": False})
    assert not treatments.is_complete({"hospital_name": ""})
    assert not treatments.is_complete({})


def test_work_section_accepts_employment_or_time_off():
    work = get_section("work")
    assert work.is_complete({"current_employment": {"employer": "Acme Ltd"}})
    assert work.is_complete({"time_off_work": "2 weeks"})
    assert not work.is_complete({"current_employment": {"duties": "Driving"}})


def test_malformed_payload_is_incomplete():
    assert not get_section("physical").is_complete("not a dict")
    assert not get_section("work").is_complete({"current_employment": "Acme"})


def test_section_payload_reads_rows_and_mappings():
    section = get_section("prognosis")

    class Row:
        prognosis = {"overall_prognosis": "Good"}

    assert section_payload(Row(), section) == {"overall_prognosis": "Good"}
    assert section_payload({"prognosis": {"overall_prognosis": "Good"}}, section) == {"overall_prognosis": "Good"}
    assert section_payload({"prognosis": "bad"}, section) is None
    assert section_payload(None, section) is None
