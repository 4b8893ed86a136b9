"""
services/section_registry.py

The fixed, ordered list of report sections. Each entry knows which Case
column holds its payload, which schema validates it and when it counts as
complete.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Type

from medlegal.db.schemas import (
    AccidentDetails,
    ClaimantDetails,
    ExpertDetails,
    FamilyHistory,
    LifestyleImpact,
    PhysicalInjury,
    Prognosis,
    PsychologicalInjuries,
    SectionPayload,
    Treatments,
    WorkHistory,
)


def is_present(value: Any) -> bool:
    """None, blank strings, and empty containers are absent. False is an answer."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict)):
        return len(value) > 0
    return True


def _all_present(payload: Mapping[str, Any], *fields: str) -> bool:
    return all(is_present(payload.get(f)) for f in fields)


def _any_answered(payload: Mapping[str, Any]) -> bool:
    return any(is_present(v) for v in payload.values())


def _work_complete(payload: Mapping[str, Any]) -> bool:
    current = payload.get("current_employment") or {}
    if isinstance(current, Mapping) and (
        is_present(current.get("employer")) or is_present(current.get("position"))
    ):
        return True
    return is_present(payload.get("time_off_work"))


@dataclass(frozen=True)
class SectionDefinition:
    id: str
    name: str
    icon: str
    api_path: str
    field: str
    schema: Type[SectionPayload]
    predicate: Callable[[Mapping[str, Any]], bool]

    def is_complete(self, payload: Optional[Mapping[str, Any]]) -> bool:
        if not isinstance(payload, Mapping) or not payload:
            return False
        try:
            return bool(self.predicate(payload))
        except (AttributeError, TypeError):
            # Hand-edited JSON with the wrong shape counts as incomplete
            return False

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "api_path": self.api_path,
            "field": self.field,
        }


SECTIONS: Tuple[SectionDefinition, ...] = (
    SectionDefinition(
        id="claimant",
        name="Claimant Details",
        icon="UserCircle",
        api_path="claimant-details",
        field="claimant_details",
        schema=ClaimantDetails,
        predicate=lambda p: _all_present(p, "full_name", "date_of_birth"),
    ),
    SectionDefinition(
        id="accident",
        name="Accident Details",
        icon="AlertTriangle",
        api_path="accident-details",
        field="accident_details",
        schema=AccidentDetails,
        predicate=lambda p: _all_present(p, "accident_date", "accident_type"),
    ),
    SectionDefinition(
        id="physical",
        name="Physical Injury Details",
        icon="Heart",
        api_path="physical-injury",
        field="physical_injury_details",
        schema=PhysicalInjury,
        predicate=lambda p: is_present(p.get("injuries")),
    ),
    SectionDefinition(
        id="psychological",
        name="Travel Anxiety",
        icon="Brain",
        api_path="psychological-injuries",
        field="psychological_injuries",
        schema=PsychologicalInjuries,
        predicate=lambda p: is_present(p.get("travel_anxiety_symptoms")),
    ),
    SectionDefinition(
        id="treatments",
        name="Treatments",
        icon="Stethoscope",
        api_path="treatments",
        field="treatments",
        schema=Treatments,
        predicate=_any_answered,
    ),
    SectionDefinition(
        id="lifestyle",
        name="Impact on Lifestyle",
        icon="Users",
        api_path="lifestyle-impact",
        field="lifestyle_impact",
        schema=LifestyleImpact,
        predicate=_any_answered,
    ),
    SectionDefinition(
        id="family",
        name="Past History of Accidents or Illness",
        icon="Users",
        api_path="family-history",
        field="family_history",
        schema=FamilyHistory,
        predicate=_any_answered,
    ),
    SectionDefinition(
        id="work",
        name="Work History",
        icon="Briefcase",
        api_path="work-history",
        field="work_history",
        schema=WorkHistory,
        predicate=_work_complete,
    ),
    SectionDefinition(
        id="prognosis",
        name="Prognosis",
        icon="ShieldCheck",
        api_path="prognosis",
        field="prognosis",
        schema=Prognosis,
        predicate=lambda p: is_present(p.get("overall_prognosis")),
    ),
    SectionDefinition(
        id="expert",
        name="Medical Expert Details",
        icon="GraduationCap",
        api_path="expert-details",
        field="expert_details",
        schema=ExpertDetails,
        predicate=lambda p: _all_present(p, "examiner", "credentials"),
    ),
)


def _index(attr: str) -> Dict[str, SectionDefinition]:
    index: Dict[str, SectionDefinition] = {}
    for section in SECTIONS:
        key = getattr(section, attr)
        if key in index:
            raise RuntimeError(f"Duplicate section {attr}: {key}")
        index[key] = section
    return index


_BY_ID = _index("id")
_BY_API_PATH = _index("api_path")
_index("field")

SECTION_IDS: Tuple[str, ...] = tuple(s.id for s in SECTIONS)


def get_section(section_id: str) -> SectionDefinition:
    """Raises KeyError for an unknown id."""
    return _BY_ID[section_id]


def get_section_by_api_path(api_path: str) -> SectionDefinition:
    """Raises KeyError for an unknown API path."""
    return _BY_API_PATH[api_path]


def section_payload(case: Any, section: SectionDefinition) -> Optional[Mapping[str, Any]]:
    """Read a section's payload from an ORM row or a plain mapping."""
    if case is None:
        return None
    if isinstance(case, Mapping):
        value = case.get(section.field)
    else:
        value = getattr(case, section.field, None)
    return value if isinstance(value, Mapping) else None
