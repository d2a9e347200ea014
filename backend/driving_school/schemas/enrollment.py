from pydantic import Field
from typing import Optional
from datetime import date

from driving_school.models.candidate import LicenseType
from driving_school.models.enrollment import EnrollmentStatus
from driving_school.schemas.common import CandidateBrief, RequestModel, TimestampedModel, UpdateModel
from driving_school.schemas.payment import PaymentPlanResponse


class EnrollmentCreate(RequestModel):
    candidate_id: str = Field(..., min_length=1)
    payment_plan_id: str = Field(..., min_length=1)
    license_category: LicenseType
    enrollment_date: Optional[date] = None


class EnrollmentUpdate(UpdateModel):
    non_nullable = {"payment_plan_id", "license_category", "enrollment_date", "status"}

    payment_plan_id: Optional[str] = Field(None, min_length=1)
    license_category: Optional[LicenseType] = None
    enrollment_date: Optional[date] = None
    status: Optional[EnrollmentStatus] = None


class EnrollmentResponse(TimestampedModel):
    id: str
    candidate_id: str
    payment_plan_id: str
    license_category: LicenseType
    enrollment_date: date
    status: EnrollmentStatus
    candidate: Optional[CandidateBrief] = None
    payment_plan: Optional[PaymentPlanResponse] = None
