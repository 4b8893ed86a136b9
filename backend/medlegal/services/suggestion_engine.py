"""
services/suggestion_engine.py

Documentation suggestions for a case. A fixed table of independent rules is
evaluated section by section (registry order, present payloads only), then a
short list of cross-section consistency rules runs over the whole case.
Every rule carries a static severity:

    info      minor improvement
    warning   important information might be missing
    critical  essential information is missing or contradictory
"""
from __future__ import annotations

import enum
import logging
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from medlegal.services.section_registry import SECTIONS, is_present, section_payload

logger = logging.getLogger(__name__)


class Severity(str, enum.Enum):
    info = "info"
    warning = "warning"
    critical = "critical"


@dataclass(frozen=True)
class Suggestion:
    section_id: str
    field: str
    message: str
    severity: Severity

    def to_dict(self) -> Dict[str, str]:
        data = asdict(self)
        data["severity"] = self.severity.value
        return data


@dataclass(frozen=True)
class Rule:
    """Fires when `check` returns True for the section payload."""
    section_id: str
    field: str
    severity: Severity
    message: str
    check: Callable[[Mapping[str, Any]], bool]


@dataclass(frozen=True)
class CrossRule:
    """Fires when `check` returns True for the mapping of all present payloads."""
    section_id: str
    field: str
    severity: Severity
    message: str
    check: Callable[[Mapping[str, Mapping[str, Any]]], bool]


# ============================================================================
# Helpers
# ============================================================================

def _parse_date(value: Any) -> Optional[date]:
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or len(value) < 10:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _missing(field: str) -> Callable[[Mapping[str, Any]], bool]:
    return lambda p: not is_present(p.get(field))


def _shorter_than(field: str, length: int) -> Callable[[Mapping[str, Any]], bool]:
    def check(p: Mapping[str, Any]) -> bool:
        value = p.get(field)
        return not isinstance(value, str) or len(value.strip()) < length
    return check


def _flag_without(flag: str, *details: str) -> Callable[[Mapping[str, Any]], bool]:
    """Flag is true but none of the detail fields are answered."""
    def check(p: Mapping[str, Any]) -> bool:
        return p.get(flag) is True and not any(p.get(d) is True for d in details)
    return check


def _injuries(p: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    return [i for i in (p.get("injuries") or []) if isinstance(i, Mapping)]


def _resolved_without_days(p: Mapping[str, Any]) -> bool:
    return any(
        i.get("current_severity") == "Resolved" and not is_present(i.get("resolution_days"))
        for i in _injuries(p)
    )


def _other_without_description(p: Mapping[str, Any]) -> bool:
    return any(
        i.get("type") == "Other" and not is_present(i.get("description")) for i in _injuries(p)
    )


def _has_anxiety(p: Mapping[str, Any]) -> bool:
    return is_present(p.get("travel_anxiety_symptoms"))


def _work_missing_employment(p: Mapping[str, Any]) -> bool:
    current = p.get("current_employment") or {}
    if not isinstance(current, Mapping):
        return True
    return not (is_present(current.get("employer")) or is_present(current.get("position")))


# ============================================================================
# Section rules
# ============================================================================

SECTION_RULES: Sequence[Rule] = (
    # Claimant
    Rule("claimant", "full_name", Severity.critical,
         "Claimant name is missing or too short. Full legal name is required for MedCo reports.",
         _shorter_than("full_name", 3)),
    Rule("claimant", "date_of_birth", Severity.critical,
         "Date of birth is required for accurate medical assessment.",
         _missing("date_of_birth")),
    Rule("claimant", "address", Severity.warning,
         "Address is missing or incomplete. Full address is required for MedCo reports.",
         _shorter_than("address", 5)),
    Rule("claimant", "date_of_examination", Severity.critical,
         "Date of examination is missing. This is a critical element of the medical report.",
         _missing("date_of_examination")),
    Rule("claimant", "interpreter_name", Severity.warning,
         "Help with communication is indicated but the interpreter is not named.",
         lambda p: p.get("help_with_communication") is True and not is_present(p.get("interpreter_name"))),
    Rule("claimant", "medco_ref_number", Severity.info,
         "MedCo reference number is not recorded.",
         _missing("medco_ref_number")),

    # Accident
    Rule("accident", "accident_date", Severity.critical,
         "Date of accident is required for timeline assessment.",
         _missing("accident_date")),
    Rule("accident", "accident_description", Severity.critical,
         "Accident description is missing or too brief. Detailed description helps establish causation.",
         _shorter_than("accident_description", 20)),
    Rule("accident", "vehicle_location", Severity.warning,
         "Location of accident should be specified.",
         _missing("vehicle_location")),
    Rule("accident", "impact_location", Severity.warning,
         "Impact location is missing. It determines the injury mechanism described in the report.",
         _missing("impact_location")),
    Rule("accident", "seat_belt_worn", Severity.info,
         "Seat belt is recorded as not worn. Confirm this with the claimant.",
         lambda p: p.get("seat_belt_worn") is False),

    # Physical injuries
    Rule("physical", "injuries", Severity.critical,
         "No physical injuries or complaints have been recorded. At least one injury area should be documented.",
         lambda p: not _injuries(p)),
    Rule("physical", "injuries", Severity.warning,
         "An injury of type Other has no description. Provide specific details for each complaint.",
         _other_without_description),
    Rule("physical", "resolution_days", Severity.warning,
         "An injury is marked as resolved but the resolution period is missing.",
         _resolved_without_days),
    Rule("physical", "physical_injury_summary", Severity.info,
         "Physical injury summary is missing.",
         _missing("physical_injury_summary")),

    # Travel anxiety
    Rule("psychological", "travel_anxiety_onset", Severity.warning,
         "Travel anxiety symptoms are reported but the onset is missing.",
         lambda p: _has_anxiety(p) and not is_present(p.get("travel_anxiety_onset"))),
    Rule("psychological", "travel_anxiety_initial_severity", Severity.warning,
         "Travel anxiety symptoms are reported but the initial severity is missing.",
         lambda p: _has_anxiety(p) and not is_present(p.get("travel_anxiety_initial_severity"))),
    Rule("psychological", "travel_anxiety_current_severity", Severity.warning,
         "Travel anxiety symptoms are reported but the current severity is missing.",
         lambda p: _has_anxiety(p) and not is_present(p.get("travel_anxiety_current_severity"))),
    Rule("psychological", "travel_anxiety_resolution_days", Severity.warning,
         "Travel anxiety is marked as resolved but the resolution period is missing.",
         lambda p: p.get("travel_anxiety_current_severity") == "Resolved"
         and not is_present(p.get("travel_anxiety_resolution_days"))),

    # Treatments
    Rule("treatments", "scene_details", Severity.info,
         "Treatment at scene is indicated but specific details are missing.",
         _flag_without("received_treatment_at_scene", "scene_first_aid", "scene_neck_collar",
                       "scene_ambulance_arrived", "scene_police_arrived", "scene_other_treatment")),
    Rule("treatments", "hospital_details", Severity.warning,
         "Hospital attendance is indicated but details of examinations or treatments are missing.",
         _flag_without("went_to_hospital", "hospital_no_treatment", "hospital_x_ray", "hospital_ct_scan",
                       "hospital_bandage", "hospital_neck_collar", "hospital_other_treatment")),
    Rule("treatments", "days_to_gp_walk_in", Severity.info,
         "GP or walk-in centre attendance is indicated but the delay after the accident is missing.",
         lambda p: p.get("went_to_gp_walk_in") is True and not is_present(p.get("days_to_gp_walk_in"))),
    Rule("treatments", "treatment_summary", Severity.info,
         "Treatment summary is missing. A comprehensive overview of all treatments is valuable for the report.",
         _missing("treatment_summary")),

    # Lifestyle
    Rule("lifestyle", "days_off_work", Severity.warning,
         "Work difficulties are indicated but days off work are not specified. "
         "This is important for compensation assessment.",
         lambda p: is_present(p.get("work_difficulties")) and not is_present(p.get("days_off_work"))),
    Rule("lifestyle", "sleep_disturbances", Severity.info,
         "Sleep disturbance is indicated but the type of disturbance is not selected.",
         lambda p: p.get("has_sleep_disturbance") is True and not is_present(p.get("sleep_disturbances"))),
    Rule("lifestyle", "domestic_activities", Severity.info,
         "Domestic impact is indicated but details are missing. Specifics help assess daily living challenges.",
         lambda p: p.get("has_domestic_impact") is True and not is_present(p.get("domestic_activities"))),
    Rule("lifestyle", "sport_leisure_activities", Severity.info,
         "Sport/leisure impact is indicated but details are missing. Specify activities affected.",
         lambda p: p.get("has_sport_leisure_impact") is True
         and not is_present(p.get("sport_leisure_activities"))),
    Rule("lifestyle", "social_activities", Severity.info,
         "Social impact is indicated but the affected activities are not selected.",
         lambda p: p.get("has_social_impact") is True and not is_present(p.get("social_activities"))),

    # Past history
    Rule("family", "previous_accident_year", Severity.warning,
         "Previous accidents are indicated but details are missing. This is important for causation assessment.",
         lambda p: p.get("has_previous_accident") is True and not is_present(p.get("previous_accident_year"))),
    Rule("family", "previous_accident_recovery", Severity.warning,
         "Previous accident is indicated but the extent of recovery is not recorded.",
         lambda p: p.get("has_previous_accident") is True
         and not is_present(p.get("previous_accident_recovery"))),
    Rule("family", "previous_medical_condition_details", Severity.warning,
         "Previous illness is indicated but details are missing. This can be important for differential diagnosis.",
         lambda p: p.get("has_previous_medical_condition") is True
         and not is_present(p.get("previous_medical_condition_details"))),

    # Work
    Rule("work", "current_employment", Severity.warning,
         "Current employment is not recorded. Employer or position helps assess the impact on work.",
         _work_missing_employment),
    Rule("work", "time_off_work", Severity.info,
         "Time off work is not recorded.",
         _missing("time_off_work")),

    # Prognosis
    Rule("prognosis", "overall_prognosis", Severity.critical,
         "Overall prognosis is missing. The report must state an opinion on prognosis.",
         _missing("overall_prognosis")),
    Rule("prognosis", "expected_recovery_time", Severity.warning,
         "Expected recovery time is missing.",
         _missing("expected_recovery_time")),

    # Expert
    Rule("expert", "examiner", Severity.critical,
         "Medical examiner name is missing or incomplete. This is required for a valid MedCo report.",
         _shorter_than("examiner", 3)),
    Rule("expert", "credentials", Severity.warning,
         "Medical examiner credentials are missing. This is required to establish expertise.",
         _missing("credentials")),
    Rule("expert", "signature_date", Severity.info,
         "Signature date is missing.",
         _missing("signature_date")),
)


# ============================================================================
# Cross-section rules
# ============================================================================

def _exam_before_accident(sections: Mapping[str, Mapping[str, Any]]) -> bool:
    accident = _parse_date(sections.get("accident", {}).get("accident_date"))
    examined = _parse_date(sections.get("claimant", {}).get("date_of_examination"))
    return bool(accident and examined and accident > examined)


def _accident_before_birth(sections: Mapping[str, Mapping[str, Any]]) -> bool:
    accident = _parse_date(sections.get("accident", {}).get("accident_date"))
    born = _parse_date(sections.get("claimant", {}).get("date_of_birth"))
    return bool(accident and born and accident < born)


def _injuries_without_treatment(sections: Mapping[str, Mapping[str, Any]]) -> bool:
    if "physical" not in sections or "treatments" not in sections:
        return False
    if not _injuries(sections["physical"]):
        return False
    treatments = sections["treatments"]
    flags = (
        "received_treatment_at_scene", "went_to_hospital", "went_to_gp_walk_in",
        "taking_paracetamol", "taking_ibuprofen", "taking_codeine", "taking_other_medication",
    )
    texts = ("physiotherapy_sessions", "emergency_treatment", "gp_visits", "hospital_treatment",
             "physiotherapy", "other_treatments", "current_medication")
    return not (any(treatments.get(f) is True for f in flags)
                or any(is_present(treatments.get(t)) for t in texts))


def _injuries_without_prognosis(sections: Mapping[str, Mapping[str, Any]]) -> bool:
    if "physical" not in sections or not _injuries(sections["physical"]):
        return False
    return "prognosis" not in sections


def _signed_before_examination(sections: Mapping[str, Mapping[str, Any]]) -> bool:
    signed = _parse_date(sections.get("expert", {}).get("signature_date"))
    examined = _parse_date(sections.get("claimant", {}).get("date_of_examination"))
    return bool(signed and examined and signed < examined)


CROSS_RULES: Sequence[CrossRule] = (
    CrossRule("claimant", "date_of_examination", Severity.critical,
              "Examination date is before the accident date. Please verify these dates.",
              _exam_before_accident),
    CrossRule("accident", "accident_date", Severity.critical,
              "Accident date is before the claimant's date of birth. Please verify these dates.",
              _accident_before_birth),
    CrossRule("treatments", "general", Severity.warning,
              "Physical injuries are reported but no treatments are documented. "
              "Review if treatment section is complete.",
              _injuries_without_treatment),
    CrossRule("prognosis", "general", Severity.warning,
              "Physical injuries are reported but no prognosis has been given.",
              _injuries_without_prognosis),
    CrossRule("expert", "signature_date", Severity.warning,
              "The report is signed before the examination date.",
              _signed_before_examination),
)


# ============================================================================
# Engine
# ============================================================================

def _present_sections(case: Any) -> Dict[str, Mapping[str, Any]]:
    sections: Dict[str, Mapping[str, Any]] = {}
    for section in SECTIONS:
        payload = section_payload(case, section)
        if payload:
            sections[section.id] = payload
    return sections


def _fires(rule, subject) -> bool:
    try:
        return bool(rule.check(subject))
    except (AttributeError, TypeError, ValueError, KeyError) as e:
        logger.debug("Rule %s.%s skipped on malformed data: %s", rule.section_id, rule.field, e)
        return False


def analyze_case(case: Any) -> List[Suggestion]:
    """
    Suggestions for a Case row or a mapping of column name to payload.

    Deterministic: the same case always yields the same list, in registry
    order followed by cross-section findings.
    """
    if case is None:
        return []

    sections = _present_sections(case)
    suggestions: List[Suggestion] = []

    for section in SECTIONS:
        payload = sections.get(section.id)
        if payload is None:
            continue
        for rule in SECTION_RULES:
            if rule.section_id == section.id and _fires(rule, payload):
                suggestions.append(Suggestion(rule.section_id, rule.field, rule.message, rule.severity))

    for rule in CROSS_RULES:
        if _fires(rule, sections):
            suggestions.append(Suggestion(rule.section_id, rule.field, rule.message, rule.severity))

    return suggestions


def summarize(suggestions: Sequence[Suggestion]) -> Dict[str, Any]:
    """Counts by severity and suggestions grouped by section id."""
    counts = {s.value: 0 for s in Severity}
    by_section: Dict[str, List[Dict[str, str]]] = {}
    for suggestion in suggestions:
        counts[suggestion.severity.value] += 1
        by_section.setdefault(suggestion.section_id, []).append(suggestion.to_dict())
    counts["total"] = len(suggestions)
    return {"summary": counts, "by_section": by_section}
