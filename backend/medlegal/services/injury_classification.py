"""
Injury classification and the opinion text printed for each injury.
"""
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

WHIPLASH = "Whiplash"
WHIPLASH_ASSOCIATED = "Whiplash Associated"
NON_WHIPLASH = "Non-whiplash"
PSYCHOLOGICAL = "Psychological"

_PSYCHOLOGICAL_TERMS = ("anxiety", "stress", "depression", "trauma")

NON_WHIPLASH_MECHANISM = (
    "It was due to the direct trauma. It is classified as a non-whiplash injury "
    "and falls within subsection 1.3 of the Civil Liability Act 2018."
)
PSYCHOLOGICAL_MECHANISM = (
    "Due to the psychological impact of the accident and its aftermath. "
    "It is classified as a psychological injury related to the accident."
)


@dataclass
class InjuryOpinion:
    injury_name: str
    onset: str
    initial_severity: str
    current_severity: str
    classification: str
    mechanism: str
    examination: str
    treatment_recommendation: str
    treatment_short: str
    prognosis: str
    prognosis_short: str
    current_status: str
    additional_report_required: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def classify_injury(injury_type: Optional[str]) -> str:
    name = (injury_type or "").lower()
    if "neck" in name or "shoulder" in name or "back" in name:
        return WHIPLASH
    if "headache" in name:
        return WHIPLASH_ASSOCIATED
    if "bruising" in name:
        return NON_WHIPLASH
    if any(term in name for term in _PSYCHOLOGICAL_TERMS):
        return PSYCHOLOGICAL
    return NON_WHIPLASH


def jolt_direction(impact_location: Optional[str]) -> str:
    impact = (impact_location or "").lower()
    if impact.startswith("front"):
        return "backward and forward"
    if "side" in impact:
        return "sideways"
    return "forward and backward"


def describe_mechanism(classification: str, impact_location: Optional[str] = None) -> str:
    if classification in (WHIPLASH, WHIPLASH_ASSOCIATED):
        return (
            f"Due to sudden jolt {jolt_direction(impact_location)} during the collision. "
            f"It is classified as a {classification} injury."
        )
    if classification == PSYCHOLOGICAL:
        return PSYCHOLOGICAL_MECHANISM
    return NON_WHIPLASH_MECHANISM


def examination_findings(classification: str, current_severity: Optional[str]) -> str:
    severity = (current_severity or "Mild").lower()
    if severity == "resolved":
        return "No findings upon examination as the injury has resolved."
    tenderness = severity if severity in ("moderate", "severe") else "mild"
    if classification in (WHIPLASH, WHIPLASH_ASSOCIATED):
        return (
            f"Palpation: {tenderness} tenderness\n"
            "Range of Motion: Flexion and extension limited due to pain\n"
            "Neurological Assessment: normal."
        )
    if classification == PSYCHOLOGICAL:
        return "Based on patient interview and self-reported symptoms. No physical examination findings."
    return (
        f"Inspection: {tenderness} visible signs\n"
        f"Palpation: {tenderness} tenderness on palpation\n"
        "Neurological Assessment: normal."
    )


def treatment_recommendation(current_severity: Optional[str], wants_physiotherapy: Optional[bool]):
    """(long text, short label). Physiotherapy unless the claimant declined it."""
    if (current_severity or "").lower() == "resolved":
        return "No further treatment needed as the injury has resolved.", "None needed"
    if wants_physiotherapy is not False:
        return (
            "Physiotherapy is recommended. Number of sessions to be advised by the referred expert.",
            "Physiotherapy",
        )
    return (
        "Pain management with appropriate over-the-counter pain medications as the claimant "
        "does not want physiotherapy.",
        "Pain medication",
    )


_PROGNOSIS_MONTHS = {"mild": 3, "moderate": 6, "severe": 9}


def prognosis_for(current_severity: Optional[str], needs_specialist_referral: bool = False):
    """(long text, short label) for the prognosis column."""
    severity = (current_severity or "").lower()
    if severity == "resolved":
        return "Injury has resolved with no expected ongoing symptoms.", "Resolved"
    if needs_specialist_referral:
        return (
            "Prognosis to be provided by referred expert in an additional report.",
            "Per specialist report",
        )
    months = _PROGNOSIS_MONTHS.get(severity)
    if months is None:
        return (
            "Prognosis uncertain at this time and will depend on response to treatment.",
            "To be determined",
        )
    return f"Expected recovery within {months} months from the date of accident.", f"{months} months"


def referred_expert(classification: str) -> str:
    if classification == PSYCHOLOGICAL:
        return "Clinical Psychologist"
    return "Orthopedic Specialist"


def build_opinion(injury: Mapping[str, Any], impact_location: Optional[str] = None) -> InjuryOpinion:
    """Opinion for one stored injury payload."""
    name = injury.get("type") or "Unknown"
    if name == "Other" and injury.get("description"):
        name = injury["description"]

    classification = injury.get("classification") or classify_injury(name)
    mechanism = injury.get("mechanism") or describe_mechanism(classification, impact_location)
    current = injury.get("current_severity") or "Mild"
    referral = injury.get("needs_specialist_referral") is True

    treatment_long, treatment_short = treatment_recommendation(current, injury.get("wants_physiotherapy"))
    prognosis_long, prognosis_short = prognosis_for(current, referral)

    additional = "Yes" if referral else "No"
    if referral:
        additional += f" ({referred_expert(classification)})"

    return InjuryOpinion(
        injury_name=name,
        onset=injury.get("onset_time") or "Not specified",
        initial_severity=injury.get("initial_severity") or "Moderate",
        current_severity=current,
        classification=classification,
        mechanism=mechanism,
        examination=examination_findings(classification, current),
        treatment_recommendation=treatment_long,
        treatment_short=treatment_short,
        prognosis=prognosis_long,
        prognosis_short=prognosis_short,
        current_status="Resolved" if current.lower() == "resolved" else f"{current} symptoms currently present",
        additional_report_required=additional,
    )


def fill_injury_defaults(injury: Dict[str, Any]) -> Dict[str, Any]:
    """
    Populate a blank classification on an injury payload in place.

    Mechanism is left alone: it depends on the accident impact location,
    which may be recorded later, so build_opinion derives it at report time.
    """
    if not injury.get("classification"):
        injury["classification"] = classify_injury(
            injury.get("description") if injury.get("type") == "Other" else injury.get("type")
        )
    return injury
