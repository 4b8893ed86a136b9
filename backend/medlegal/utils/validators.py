"""
Custom validators
"""
import re

from fastapi import HTTPException

from medlegal.core.config import settings

CASE_NUMBER_PATTERN = r'^[A-Z]+-\d{4}-\d{3,}$'


def validate_case_number(case_number: str) -> bool:
    """
    Validate case number format
    Examples: MED-2025-001, MED-2025-1234
    """
    return bool(re.match(CASE_NUMBER_PATTERN, case_number or ""))


def parse_case_number(case_number: str):
    """Split MED-2025-007 into ("MED", 2025, 7); None when malformed."""
    if not validate_case_number(case_number):
        return None
    prefix, year, seq = case_number.split("-")
    return prefix, int(year), int(seq)


def require_case_number(case_number: str) -> str:
    if not validate_case_number(case_number):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid case number format. Expected: {settings.CASE_NUMBER_PREFIX}-2025-001"
        )
    return case_number
