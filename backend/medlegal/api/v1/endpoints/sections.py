"""
Per-section read/write endpoints and the section registry listing
"""
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from medlegal.api.v1.deps import get_owned_case
from medlegal.db.database import get_db
from medlegal.db.models import Case
from medlegal.db.schemas import SectionDefinitionResponse, SectionPayloadResponse
from medlegal.services.case_store import case_store
from medlegal.services.section_registry import (
    SECTIONS,
    SectionDefinition,
    get_section_by_api_path,
    section_payload,
)
from medlegal.utils.exceptions import SectionNotFoundError

router = APIRouter()


def _resolve(api_path: str) -> SectionDefinition:
    try:
        return get_section_by_api_path(api_path)
    except KeyError:
        raise SectionNotFoundError(api_path)


def _payload_response(case: Case, section: SectionDefinition) -> dict:
    data = section_payload(case, section)
    return {
        "case_id": case.id,
        "section": section.id,
        "data": data,
        "complete": section.is_complete(data),
        "completion_percentage": case.completion_percentage,
    }


@router.get("/sections", response_model=List[SectionDefinitionResponse])
def list_sections():
    """Report sections in display order"""
    return [s.to_dict() for s in SECTIONS]


@router.get("/cases/{case_id}/sections/{api_path}", response_model=SectionPayloadResponse)
def get_section_payload(api_path: str, case: Case = Depends(get_owned_case)):
    return _payload_response(case, _resolve(api_path))


@router.put("/cases/{case_id}/sections/{api_path}", response_model=SectionPayloadResponse)
def save_section_payload(
    api_path: str,
    payload: Dict[str, Any] = Body(...),
    case: Case = Depends(get_owned_case),
    db: Session = Depends(get_db)
):
    """
    Validate and store one section. The case completion percentage is
    recomputed in the same transaction.
    """
    section = _resolve(api_path)
    try:
        case = case_store.save_section(db, case, section.id, payload)
    except ValidationError as e:
        errors = e.errors(include_url=False, include_context=False)
        raise RequestValidationError(
            [{**err, "loc": ("body", *err["loc"])} for err in errors]
        )
    return _payload_response(case, section)
