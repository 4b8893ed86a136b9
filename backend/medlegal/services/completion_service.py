"""
Completion percentage for a case, derived from its section payloads
"""
import math
from typing import Any, Dict, List, Optional

from medlegal.services.section_registry import SECTIONS, section_payload


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def section_statuses(case: Any) -> List[Dict[str, Any]]:
    """Registry-ordered completeness of every section."""
    statuses = []
    for section in SECTIONS:
        info = section.to_dict()
        info.pop("field")
        info["complete"] = section.is_complete(section_payload(case, section))
        statuses.append(info)
    return statuses


def completed_section_count(case: Any) -> int:
    return sum(1 for s in SECTIONS if s.is_complete(section_payload(case, s)))


def calculate_completion_percentage(case: Any) -> int:
    """
    Integer 0-100: completed sections over total sections, rounded half up.

    Accepts a Case row or a mapping keyed by column name. A missing case is 0.
    """
    if case is None:
        return 0
    return _round_half_up(completed_section_count(case) / len(SECTIONS) * 100)


def next_incomplete_section(case: Any) -> Optional[str]:
    for section in SECTIONS:
        if not section.is_complete(section_payload(case, section)):
            return section.id
    return None
