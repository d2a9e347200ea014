from sqlalchemy import Column, DateTime, Date, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime, date
import enum

from driving_school.core.database import Base
from driving_school.core.types import GUID, generate_uuid
from driving_school.models.candidate import LicenseType


class EnrollmentStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Enrollment(Base):
    """Links a candidate to a licence category and a payment plan"""
    __tablename__ = "enrollments"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    candidate_id = Column(GUID, ForeignKey("candidates.id"), nullable=False, index=True)
    payment_plan_id = Column(GUID, ForeignKey("payment_plans.id"), nullable=False)
    license_category = Column(SQLEnum(LicenseType), nullable=False)
    enrollment_date = Column(Date, default=date.today, nullable=False)
    status = Column(SQLEnum(EnrollmentStatus), default=EnrollmentStatus.ACTIVE, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    candidate = relationship("Candidate", lazy="selectin")
    payment_plan = relationship("PaymentPlan", lazy="selectin")

    def __repr__(self):
        return f"<Enrollment {self.candidate_id} {self.license_category}>"
