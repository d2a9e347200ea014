from sqlalchemy import Column, String, DateTime, Date, ForeignKey, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from driving_school.core.database import Base
from driving_school.core.types import GUID, generate_uuid
from driving_school.models.candidate import Phase


class SessionStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Session(Base):
    """Training session on the school schedule"""
    __tablename__ = "sessions"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    candidate_id = Column(GUID, ForeignKey("candidates.id"), nullable=False, index=True)
    instructor_id = Column(GUID, ForeignKey("instructors.id"), nullable=False, index=True)
    vehicle_id = Column(GUID, ForeignKey("vehicles.id", ondelete="SET NULL"), nullable=True)

    lesson_type = Column(SQLEnum(Phase), nullable=False)
    date = Column(Date, nullable=False)
    time = Column(String(5), nullable=False)  # HH:MM
    status = Column(SQLEnum(SessionStatus), default=SessionStatus.SCHEDULED, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    candidate = relationship("Candidate", lazy="selectin")
    instructor = relationship("Instructor", lazy="selectin")
    vehicle = relationship("Vehicle", lazy="selectin")

    __table_args__ = (
        Index("ix_sessions_slot", "date", "time"),
    )

    def __repr__(self):
        return f"<Session {self.lesson_type} {self.date} {self.time}>"
