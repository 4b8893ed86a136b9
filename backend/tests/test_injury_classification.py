import pytest

from medlegal.services.injury_classification import (
    NON_WHIPLASH_MECHANISM,
    build_opinion,
    classify_injury,
    describe_mechanism,
    examination_findings,
    fill_injury_defaults,
    prognosis_for,
    treatment_recommendation,
)


@pytest.mark.parametrize("injury_type,expected", [
    ("Neck", "Whiplash"),
    ("Upper Back / Shoulders", "Whiplash"),
    ("Lower Back", "Whiplash"),
    ("Headaches", "Whiplash Associated"),
    ("Bruising", "Non-whiplash"),
    ("Travel anxiety", "Psychological"),
    ("Knee", "Non-whiplash"),
    (None, "Non-whiplash"),
])
def test_classify_injury(injury_type, expected):
    assert classify_injury(injury_type) == expected


@pytest.mark.parametrize("impact,direction", [
    ("Rear", "forward and backward"),
    ("Front", "backward and forward"),
    ("Left Side", "sideways"),
    ("Right Side", "sideways"),
    (None, "forward and backward"),
])
def test_whiplash_mechanism_follows_impact(impact, direction):
    assert f"jolt {direction}" in describe_mechanism("Whiplash", impact)


def test_non_whiplash_and_psychological_mechanisms():
    assert describe_mechanism("Non-whiplash", "Rear") == NON_WHIPLASH_MECHANISM
    assert describe_mechanism("Psychological").startswith("Due to the psychological impact")


def test_examination_findings_by_severity():
    assert "resolved" in examination_findings("Whiplash", "Resolved")
    assert "moderate tenderness" in examination_findings("Whiplash", "Moderate")
    assert "severe visible signs" in examination_findings("Non-whiplash", "Severe")


def test_treatment_recommendation():
    assert treatment_recommendation("Resolved", True)[1] == "None needed"
    assert treatment_recommendation("Mild", None)[1] == "Physiotherapy"
    assert treatment_recommendation("Mild", False)[1] == "Pain medication"


@pytest.mark.parametrize("severity,label", [
    ("Mild", "3 months"),
    ("Moderate", "6 months"),
    ("Severe", "9 months"),
    ("Resolved", "Resolved"),
])
def test_prognosis_by_severity(severity, label):
    assert prognosis_for(severity)[1] == label


def test_specialist_referral_overrides_prognosis():
    assert prognosis_for("Severe", needs_specialist_referral=True)[1] == "Per specialist report"


def test_build_opinion_uses_description_for_other():
    opinion = build_opinion(
        {"type": "Other", "description": "Stress", "onset_time": "Next Day",
         "initial_severity": "Mild", "current_severity": "Mild", "needs_specialist_referral": True},
    )
    assert opinion.injury_name == "Stress"
    assert opinion.classification == "Psychological"
    assert opinion.additional_report_required == "Yes (Clinical Psychologist)"


def test_fill_injury_defaults_keeps_existing_values():
    injury = fill_injury_defaults({"type": "Neck"})
    assert injury["classification"] == "Whiplash"
    assert "mechanism" not in injury

    custom = fill_injury_defaults({"type": "Neck", "mechanism": "Seat jolt", "classification": "Whiplash"})
    assert custom["mechanism"] == "Seat jolt"


def test_build_opinion_derives_mechanism_from_impact():
    injury = fill_injury_defaults(
        {"type": "Neck", "onset_time": "Same Day", "initial_severity": "Mild", "current_severity": "Mild"}
    )
    assert "sideways" in build_opinion(injury, "Right Side").mechanism
    assert "backward and forward" in build_opinion(injury, "Front").mechanism
    assert build_opinion({**injury, "mechanism": "Seat jolt"}, "Front").mechanism == "Seat jolt"
