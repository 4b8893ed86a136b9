# backend/medlegal/db/seed.py

"""
Database Seeding Script

Creates a demo doctor and one partly completed case for development.

    python -m medlegal.db.seed
"""

from datetime import date, timedelta

from sqlalchemy.orm import Session

from medlegal.core.logger import logger
from medlegal.core.security import get_password_hash
from medlegal.db.database import SessionLocal, init_db
from medlegal.db.models import User, UserRole
from medlegal.db.schemas import CaseCreate
from medlegal.services.case_store import case_store

DEMO_USERNAME = "doctor"
DEMO_PASSWORD = "password123"

# ============================================================================
# Seed Data
# ============================================================================

def create_demo_user(db: Session) -> User:
    """Create the demo doctor, or return it if it already exists"""
    user = db.query(User).filter(User.username == DEMO_USERNAME).first()
    if user:
        return user

    user = User(
        username=DEMO_USERNAME,
        password_hash=get_password_hash(DEMO_PASSWORD),
        full_name="Dr. Sarah Johnson",
        role=UserRole.doctor,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Created demo user: {user.username}")
    return user


def create_sample_case(db: Session, user: User):
    """Claimant, accident and injuries filled in; the rest left for the editor"""
    accident_date = date.today() - timedelta(days=60)
    data = CaseCreate.model_validate({
        "claimant_details": {
            "full_name": "John Smith",
            "date_of_birth": "1985-04-12",
            "gender": "Male",
            "address": "12 Station Road, Preston PR1 1AA",
            "date_of_examination": date.today().isoformat(),
            "solicitor_name": "Harper & Co Solicitors",
        },
        "accident_details": {
            "accident_date": accident_date.isoformat(),
            "accident_type": "Rear-end collision",
            "time_of_day": "Morning",
            "vehicle_location": "Main Road",
            "vehicle_type": "Car",
            "claimant_position": "Driver",
            "impact_location": "Rear",
            "vehicle_movement": "Stationary",
            "damage_severity": "Moderately Damaged",
            "accident_description": "Stationary at traffic lights when struck from behind by a van.",
        },
        "physical_injury_details": {
            "injuries": [
                {
                    "type": "Neck",
                    "onset_time": "Same Day",
                    "initial_severity": "Moderate",
                    "current_severity": "Mild",
                },
                {
                    "type": "Headaches",
                    "onset_time": "Next Day",
                    "initial_severity": "Mild",
                    "current_severity": "Resolved",
                    "resolution_days": "14",
                },
            ],
        },
    })
    case = case_store.create_case(db, user.id, data)
    logger.info(f"Created sample case {case.case_number} ({case.completion_percentage}%)")
    return case


def seed():
    init_db()
    db = SessionLocal()
    try:
        user = create_demo_user(db)
        if not user.cases:
            create_sample_case(db, user)
    finally:
        db.close()


if __name__ == "__main__":
    seed()
