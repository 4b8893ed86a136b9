from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from medlegal.core.config import settings
from medlegal.db.models import Case, CaseStatus
from medlegal.db.schemas import CaseCreate, CaseUpdate, SectionPayload
from medlegal.services.completion_service import calculate_completion_percentage
from medlegal.services.injury_classification import fill_injury_defaults
from medlegal.services.section_registry import SECTIONS, SectionDefinition, get_section
from medlegal.utils.exceptions import CaseNumberConflictError, CaseSaveError
from medlegal.utils.validators import parse_case_number

logger = logging.getLogger(__name__)

_CASE_NUMBER_ATTEMPTS = 3


class CaseStore:
    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_cases(
        self,
        db: Session,
        user_id: int,
        status: Optional[CaseStatus] = None,
        q: Optional[str] = None,
    ) -> List[Case]:
        query = db.query(Case).filter(Case.user_id == user_id)
        if status:
            query = query.filter(Case.status == status)
        cases = query.order_by(Case.updated_at.desc(), Case.id.desc()).all()

        if q and q.strip():
            term = q.strip().lower()
            cases = [
                c for c in cases
                if term in c.case_number.lower() or term in _claimant_name(c).lower()
            ]
        return cases

    def get_case(self, db: Session, case_id: int) -> Optional[Case]:
        return db.query(Case).filter(Case.id == case_id).first()

    def get_case_by_number(self, db: Session, case_number: str) -> Optional[Case]:
        return db.query(Case).filter(Case.case_number == case_number).first()

    def stats(self, db: Session, user_id: int) -> Dict[str, Any]:
        cases = db.query(Case).filter(Case.user_id == user_id).all()
        by_status = {s.value: 0 for s in CaseStatus}
        for case in cases:
            by_status[CaseStatus(case.status).value] += 1
        average = round(sum(c.completion_percentage for c in cases) / len(cases)) if cases else 0
        return {"total": len(cases), "by_status": by_status, "average_completion": average}

    # ------------------------------------------------------------------
    # Case numbers
    # ------------------------------------------------------------------

    def generate_case_number(self, db: Session, year: Optional[int] = None) -> str:
        """Next PREFIX-YYYY-NNN after the highest number already issued this year."""
        prefix = settings.CASE_NUMBER_PREFIX
        year = year or datetime.utcnow().year
        issued = (
            db.query(Case.case_number)
            .filter(Case.case_number.like(f"{prefix}-{year}-%"))
            .all()
        )
        highest = 0
        for (number,) in issued:
            parsed = parse_case_number(number)
            if parsed and parsed[0] == prefix and parsed[1] == year:
                highest = max(highest, parsed[2])
        return f"{prefix}-{year}-{highest + 1:03d}"

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_case(self, db: Session, user_id: int, data: Optional[CaseCreate] = None) -> Case:
        data = data or CaseCreate()
        case_number = None

        for _ in range(_CASE_NUMBER_ATTEMPTS):
            case_number = self.generate_case_number(db)
            case = Case(case_number=case_number, user_id=user_id, status=data.status)
            for section in SECTIONS:
                payload = getattr(data, section.field)
                if payload is not None:
                    self._write_section(case, section, payload)
            case.completion_percentage = calculate_completion_percentage(case)

            db.add(case)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                logger.warning("Case number %s taken, retrying", case_number)
                continue
            except SQLAlchemyError:
                db.rollback()
                logger.exception("Failed to create case")
                raise CaseSaveError("case")

            db.refresh(case)
            logger.info("Case created: %s (user %s)", case.case_number, user_id)
            return case

        raise CaseNumberConflictError(case_number)

    def update_case(self, db: Session, case: Case, data: CaseUpdate) -> Case:
        for name in data.model_fields_set:
            value = getattr(data, name)
            if name == "status":
                if value is not None:
                    case.status = value
                continue
            section = _section_for_field(name)
            if value is None:
                setattr(case, section.field, None)
            else:
                self._write_section(case, section, value)

        return self._recompute_and_commit(db, case, "case")

    def save_section(self, db: Session, case: Case, section_id: str, payload: Mapping[str, Any]) -> Case:
        """
        Validate and store one section, then recompute completion in the same commit.

        Raises pydantic.ValidationError for a bad payload; the case is untouched.
        """
        section = get_section(section_id)
        validated = section.schema.model_validate(payload)
        self._write_section(case, section, validated)
        case = self._recompute_and_commit(db, case, section.name)
        logger.info("Section %s saved on %s (%s%%)", section.id, case.case_number, case.completion_percentage)
        return case

    def recalculate_completion(self, db: Session, case: Case) -> Case:
        return self._recompute_and_commit(db, case, "completion")

    def set_status(self, db: Session, case: Case, status: CaseStatus) -> Case:
        case.status = status
        case = self._recompute_and_commit(db, case, "case status")
        logger.info("Case %s marked %s", case.case_number, status.value)
        return case

    def delete_case(self, db: Session, case: Case) -> None:
        number = case.case_number
        try:
            db.delete(case)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to delete case %s", number)
            raise CaseSaveError("case deletion")
        logger.info("Case deleted: %s", number)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _write_section(self, case: Case, section: SectionDefinition, payload: SectionPayload) -> None:
        data = payload.to_storage()
        if section.id == "physical" and data.get("injuries"):
            data["injuries"] = [fill_injury_defaults(dict(i)) for i in data["injuries"]]
        setattr(case, section.field, data)

    def _recompute_and_commit(self, db: Session, case: Case, what: str) -> Case:
        case.completion_percentage = calculate_completion_percentage(case)
        case.updated_at = datetime.utcnow()
        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to save %s for case %s", what, case.id)
            raise CaseSaveError(what)
        db.refresh(case)
        return case


def _section_for_field(field: str) -> SectionDefinition:
    for section in SECTIONS:
        if section.field == field:
            return section
    raise KeyError(field)


def _claimant_name(case: Case) -> str:
    details = case.claimant_details or {}
    name = details.get("full_name") if isinstance(details, Mapping) else None
    return name or ""


case_store = CaseStore()
