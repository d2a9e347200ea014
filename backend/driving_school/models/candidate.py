"""
Candidate (student) model

A candidate trains through three phases in order: highway code, parking,
then driving. ``phases`` keeps one counter block per phase and ``progress``
names the phase the candidate is currently in.
"""

from sqlalchemy import Column, String, DateTime, Date, Float, JSON, Enum as SQLEnum
from datetime import datetime, date
from typing import Any, Dict, List, Optional
import enum

from driving_school.core.database import Base
from driving_school.core.types import GUID, generate_uuid


class LicenseType(str, enum.Enum):
    """Licence categories taught by the school"""
    A1 = "A1"
    A2 = "A2"
    B = "B"
    C1 = "C1"
    C2 = "C2"
    D = "D"


class CandidateStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    DELETED = "deleted"


class Phase(str, enum.Enum):
    """Training phases, also used as lesson and exam types"""
    HIGHWAY_CODE = "highway_code"
    PARKING = "parking"
    DRIVING = "driving"


class PhaseStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


PHASE_ORDER: List[Phase] = [Phase.HIGHWAY_CODE, Phase.PARKING, Phase.DRIVING]

SESSIONS_PER_PHASE = 10
DEFAULT_TOTAL_FEE = 34000.0

DEFAULT_DOCUMENTS = [
    "Birth certificate",
    "Residence certificate",
    "6 photos",
    "Medical certificate",
    "National ID copy",
    "Parental authorization (if under 19)",
]


def next_phase(phase: Phase) -> Optional[Phase]:
    """Phase that follows ``phase``, or None after driving"""
    index = PHASE_ORDER.index(phase)
    if index + 1 < len(PHASE_ORDER):
        return PHASE_ORDER[index + 1]
    return None


def calculate_age(date_of_birth: date, today: Optional[date] = None) -> int:
    today = today or date.today()
    years = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        years -= 1
    return years


def default_documents() -> List[Dict[str, Any]]:
    """Unchecked document checklist for a new candidate"""
    return [{"name": name, "checked": False} for name in DEFAULT_DOCUMENTS]


def default_phases() -> List[Dict[str, Any]]:
    """Counters for every phase; training starts in the first one"""
    return [
        {
            "phase": phase.value,
            "status": (PhaseStatus.IN_PROGRESS if phase == PHASE_ORDER[0] else PhaseStatus.NOT_STARTED).value,
            "sessions_completed": 0,
            "sessions_plan": SESSIONS_PER_PHASE,
            "exam_passed": False,
            "exam_attempts": 0,
        }
        for phase in PHASE_ORDER
    ]


class Candidate(Base):
    """Driving school candidate"""
    __tablename__ = "candidates"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(15), unique=True, index=True, nullable=False)
    address = Column(String(200), nullable=True)
    date_of_birth = Column(Date, nullable=True)

    license_type = Column(SQLEnum(LicenseType), nullable=False)
    registration_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    status = Column(SQLEnum(CandidateStatus), default=CandidateStatus.ACTIVE, nullable=False, index=True)
    progress = Column(SQLEnum(Phase), default=Phase.HIGHWAY_CODE, nullable=False)

    total_fee = Column(Float, default=DEFAULT_TOTAL_FEE, nullable=False)
    paid_amount = Column(Float, default=0.0, nullable=False)

    documents = Column(JSON, nullable=False, default=list)
    phases = Column(JSON, nullable=False, default=default_phases)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def remaining_amount(self) -> float:
        return max(0.0, (self.total_fee or 0.0) - (self.paid_amount or 0.0))

    def get_phase(self, phase: Phase) -> Dict[str, Any]:
        for entry in self.phases or []:
            if entry.get("phase") == phase.value:
                return entry
        raise KeyError(phase.value)

    def __repr__(self):
        return f"<Candidate {self.email}>"
