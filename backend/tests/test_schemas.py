from datetime import date

import pytest
from pydantic import ValidationError

from medlegal.db.schemas import (
    AccidentDetails,
    CaseUpdate,
    ClaimantDetails,
    Injury,
    LifestyleImpact,
    PhysicalInjury,
    ReportOptions,
    Treatments,
)


def test_claimant_requires_name_and_date_of_birth():
    with pytest.raises(ValidationError) as exc:
        ClaimantDetails.model_validate({"full_name": "John Smith"})
    assert any(e["loc"] == ("date_of_birth",) for e in exc.value.errors())


def test_claimant_defaults():
    claimant = ClaimantDetails.model_validate({"full_name": "John Smith", "date_of_birth": "1985-04-12"})
    assert claimant.gender == "Not specified"
    assert claimant.accompanied_by == "Alone"
    assert claimant.time_spent == "15 min"
    assert claimant.date_of_report == date.today()
    assert claimant.to_storage()["date_of_birth"] == "1985-04-12"
    assert "address" not in claimant.to_storage()


def test_interpreter_only_with_help_with_communication():
    base = {"full_name": "John Smith", "date_of_birth": "1985-04-12", "interpreter_name": "Ali"}
    with pytest.raises(ValidationError):
        ClaimantDetails.model_validate(base)
    ClaimantDetails.model_validate({**base, "help_with_communication": True})


def test_enumerated_fields_reject_unknown_values():
    with pytest.raises(ValidationError):
        AccidentDetails.model_validate(
            {"accident_date": "2025-01-10", "accident_type": "Rear-end", "impact_location": "Roof"}
        )


def test_injury_other_requires_description():
    injury = {"type": "Other", "onset_time": "Same Day", "initial_severity": "Mild", "current_severity": "Mild"}
    with pytest.raises(ValidationError):
        Injury.model_validate(injury)
    assert Injury.model_validate({**injury, "description": "Knee pain"}).description == "Knee pain"


def test_injury_classification_is_enumerated():
    from typing import get_args

    from medlegal.db.schemas import InjuryClassification
    from medlegal.services import injury_classification

    injury = {"type": "Neck", "onset_time": "Same Day", "initial_severity": "Mild", "current_severity": "Mild"}
    with pytest.raises(ValidationError):
        Injury.model_validate({**injury, "classification": "Broken"})
    assert Injury.model_validate({**injury, "classification": "Whiplash"}).classification == "Whiplash"
    assert set(get_args(InjuryClassification)) == {
        injury_classification.WHIPLASH,
        injury_classification.WHIPLASH_ASSOCIATED,
        injury_classification.NON_WHIPLASH,
        injury_classification.PSYCHOLOGICAL,
    }


def test_injury_description_rejected_for_listed_types():
    with pytest.raises(ValidationError):
        Injury.model_validate({
            "type": "Neck", "description": "stiff", "onset_time": "Same Day",
            "initial_severity": "Mild", "current_severity": "Mild",
        })


def test_resolution_days_only_when_resolved():
    injury = {"type": "Neck", "onset_time": "Same Day", "initial_severity": "Mild",
              "current_severity": "Mild", "resolution_days": "10"}
    with pytest.raises(ValidationError):
        PhysicalInjury.model_validate({"injuries": [injury]})
    PhysicalInjury.model_validate({"injuries": [{**injury, "current_severity": "Resolved"}]})


def test_treatment_other_details_need_flag():
    with pytest.raises(ValidationError):
        Treatments.model_validate({"other_medication_details": "Naproxen"})
    Treatments.model_validate({"taking_other_medication": True, "other_medication_details": "Naproxen"})


def test_lifestyle_other_details_need_other_option():
    with pytest.raises(ValidationError):
        LifestyleImpact.model_validate({"sleep_disturbances": ["Waking up"], "sleep_other_details": "Nightmares"})
    LifestyleImpact.model_validate({"sleep_disturbances": ["Other"], "sleep_other_details": "Nightmares"})
    with pytest.raises(ValidationError):
        LifestyleImpact.model_validate({"lives_with_who": "Alone", "lives_with_other": "Lodger"})


def test_case_update_has_no_completion_field():
    update = CaseUpdate.model_validate({"completion_percentage": 100})
    assert "completion_percentage" not in update.model_fields_set
    assert not hasattr(update, "completion_percentage")


def test_report_options_validate_section_ids():
    assert ReportOptions().page_size == "a4"
    ReportOptions(sections_to_include=["claimant", "expert"])
    with pytest.raises(ValidationError):
        ReportOptions(sections_to_include=["claimant", "billing"])
    with pytest.raises(ValidationError):
        ReportOptions(page_size="a3")
