from sqlalchemy import Column, String, DateTime, Date, Float, Integer, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from driving_school.core.database import Base
from driving_school.core.types import GUID, generate_uuid
from driving_school.models.candidate import Phase


class ExamStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    PASSED = "passed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ExamResultStatus(str, enum.Enum):
    PASS = "pass"
    FAIL = "fail"


class Exam(Base):
    """Exam sitting for one phase"""
    __tablename__ = "exams"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    candidate_id = Column(GUID, ForeignKey("candidates.id"), nullable=False, index=True)
    instructor_id = Column(GUID, ForeignKey("instructors.id"), nullable=False, index=True)
    course_id = Column(GUID, ForeignKey("courses.id", ondelete="SET NULL"), nullable=True)

    exam_type = Column(SQLEnum(Phase), nullable=False)
    date = Column(Date, nullable=False)
    time = Column(String(5), nullable=False)  # HH:MM
    status = Column(SQLEnum(ExamStatus), default=ExamStatus.SCHEDULED, nullable=False)
    attempt_number = Column(Integer, default=1, nullable=False)
    notes = Column(String(500), nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    candidate = relationship("Candidate", lazy="selectin")
    instructor = relationship("Instructor", lazy="selectin")

    def __repr__(self):
        return f"<Exam {self.exam_type} {self.date} {self.status}>"


class ExamResult(Base):
    """Recorded outcome of an exam"""
    __tablename__ = "exam_results"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    exam_id = Column(GUID, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True)
    candidate_id = Column(GUID, ForeignKey("candidates.id"), nullable=False, index=True)
    score = Column(Float, nullable=True)
    status = Column(SQLEnum(ExamResultStatus), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<ExamResult {self.exam_id} {self.status}>"
