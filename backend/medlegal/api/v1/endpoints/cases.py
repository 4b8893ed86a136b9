"""
Case management endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from medlegal.api.v1.deps import get_current_user, get_owned_case
from medlegal.db.database import get_db
from medlegal.db.models import Case, CaseStatus, User
from medlegal.db.schemas import (
    CaseCreate,
    CaseListResponse,
    CaseResponse,
    CaseUpdate,
    CompletionResponse,
    ProgressResponse,
    SuggestionListResponse,
)
from medlegal.services.case_store import case_store
from medlegal.services.completion_service import (
    calculate_completion_percentage,
    completed_section_count,
    next_incomplete_section,
    section_statuses,
)
from medlegal.services.section_registry import SECTIONS
from medlegal.services.suggestion_engine import analyze_case, summarize
from medlegal.utils.exceptions import CaseNotFoundError, UnauthorizedError
from medlegal.utils.validators import require_case_number

router = APIRouter()

# ============================================================================
# List & Filter Endpoints
# ============================================================================

@router.get("", response_model=CaseListResponse)
def list_cases(
    status: Optional[CaseStatus] = Query(None, description="Filter by status"),
    q: Optional[str] = Query(None, description="Search case number or claimant name"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Cases owned by the authenticated user, most recently updated first
    """
    cases = case_store.list_cases(db, current_user.id, status=status, q=q)
    return {"items": cases, "total": len(cases)}


@router.get("/stats")
def get_case_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return case_store.stats(db, current_user.id)


@router.get("/by-number/{case_number}", response_model=CaseResponse)
def get_case_by_number(
    case_number: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Look up a case by its MED-YYYY-NNN number"""
    case = case_store.get_case_by_number(db, require_case_number(case_number.strip().upper()))
    if not case:
        raise CaseNotFoundError(case_number)
    if case.user_id != current_user.id:
        raise UnauthorizedError()
    return case


# ============================================================================
# CRUD
# ============================================================================

@router.post("", response_model=CaseResponse, status_code=status.HTTP_201_CREATED)
def create_case(
    case_data: Optional[CaseCreate] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a case with a generated case number; sections are optional"""
    return case_store.create_case(db, current_user.id, case_data)


@router.get("/{case_id}", response_model=CaseResponse)
def get_case(case: Case = Depends(get_owned_case)):
    return case


@router.patch("/{case_id}", response_model=CaseResponse)
def update_case(
    update_data: CaseUpdate,
    case: Case = Depends(get_owned_case),
    db: Session = Depends(get_db)
):
    """
    Update status and/or whole section payloads. Completion is recomputed.
    """
    return case_store.update_case(db, case, update_data)


@router.delete("/{case_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_case(
    case: Case = Depends(get_owned_case),
    db: Session = Depends(get_db)
):
    case_store.delete_case(db, case)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Status lifecycle
# ============================================================================

@router.post("/{case_id}/complete", response_model=CaseResponse)
def complete_case(case: Case = Depends(get_owned_case), db: Session = Depends(get_db)):
    return case_store.set_status(db, case, CaseStatus.completed)


@router.post("/{case_id}/archive", response_model=CaseResponse)
def archive_case(case: Case = Depends(get_owned_case), db: Session = Depends(get_db)):
    return case_store.set_status(db, case, CaseStatus.archived)


@router.post("/{case_id}/reopen", response_model=CaseResponse)
def reopen_case(case: Case = Depends(get_owned_case), db: Session = Depends(get_db)):
    return case_store.set_status(db, case, CaseStatus.in_progress)


# ============================================================================
# Completion & suggestions
# ============================================================================

@router.post("/{case_id}/calculate-completion", response_model=CompletionResponse)
def calculate_completion(case: Case = Depends(get_owned_case), db: Session = Depends(get_db)):
    """Recompute and persist the completion percentage from the stored sections"""
    case = case_store.recalculate_completion(db, case)
    return {"completion_percentage": case.completion_percentage}


@router.get("/{case_id}/progress", response_model=ProgressResponse)
def get_progress(case: Case = Depends(get_owned_case)):
    return {
        "case_id": case.id,
        "completion_percentage": calculate_completion_percentage(case),
        "completed_sections": completed_section_count(case),
        "total_sections": len(SECTIONS),
        "next_section": next_incomplete_section(case),
        "sections": section_statuses(case),
    }


@router.get("/{case_id}/suggestions", response_model=SuggestionListResponse)
def get_suggestions(case: Case = Depends(get_owned_case)):
    suggestions = analyze_case(case)
    return {
        "case_id": case.id,
        "suggestions": [s.to_dict() for s in suggestions],
        **summarize(suggestions),
    }
