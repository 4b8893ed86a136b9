"""
SQLAlchemy ORM Models
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    String,
    TIMESTAMP,
    CheckConstraint,
    Index,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from medlegal.db.database import Base

# JSONB on PostgreSQL, plain JSON everywhere else
SectionJSON = JSON().with_variant(JSONB(), "postgresql")

# ============================================================================
# Enums
# ============================================================================

class UserRole(str, enum.Enum):
    """User roles"""
    user = "user"
    doctor = "doctor"
    admin = "admin"


class CaseStatus(str, enum.Enum):
    """Case status enum"""
    in_progress = "in_progress"
    completed = "completed"
    archived = "archived"


# ============================================================================
# Models
# ============================================================================

class User(Base):
    """Report author / case owner"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)

    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.user)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    cases = relationship("Case", back_populates="owner", cascade="all, delete-orphan")


class Case(Base):
    """Medico-legal report case: one row, one JSON payload per section"""
    __tablename__ = "cases"
    __table_args__ = (
        CheckConstraint(
            "completion_percentage >= 0 AND completion_percentage <= 100",
            name="ck_cases_completion_range",
        ),
        Index("ix_cases_user_status", "user_id", "status"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    case_number = Column(String(32), unique=True, nullable=False, index=True)
    status = Column(SQLEnum(CaseStatus), nullable=False, default=CaseStatus.in_progress)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # Section payloads
    claimant_details = Column(SectionJSON, nullable=True)
    accident_details = Column(SectionJSON, nullable=True)
    physical_injury_details = Column(SectionJSON, nullable=True)
    psychological_injuries = Column(SectionJSON, nullable=True)
    treatments = Column(SectionJSON, nullable=True)
    lifestyle_impact = Column(SectionJSON, nullable=True)
    family_history = Column(SectionJSON, nullable=True)
    work_history = Column(SectionJSON, nullable=True)
    prognosis = Column(SectionJSON, nullable=True)
    expert_details = Column(SectionJSON, nullable=True)

    # Derived from the payloads above, never written by clients
    completion_percentage = Column(Integer, nullable=False, default=0)

    # Timestamps
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = relationship("User", back_populates="cases")

    def __repr__(self):
        return f"<Case {self.case_number}>"
