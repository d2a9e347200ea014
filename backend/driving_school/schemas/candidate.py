from pydantic import AfterValidator, Field
from typing import Annotated, List, Optional
from datetime import date, datetime

from driving_school.models.candidate import (
    CandidateStatus,
    LicenseType,
    Phase,
    PhaseStatus,
    calculate_age,
)
from driving_school.schemas.common import (
    Email,
    ORMModel,
    Phone,
    RequestModel,
    TimestampedModel,
    UpdateModel,
)

MIN_CANDIDATE_AGE = 16
MAX_CANDIDATE_AGE = 100


def validate_date_of_birth(value: date) -> date:
    age = calculate_age(value)
    if age < MIN_CANDIDATE_AGE or age > MAX_CANDIDATE_AGE:
        raise ValueError(f"candidate must be between {MIN_CANDIDATE_AGE} and {MAX_CANDIDATE_AGE} years old")
    return value


DateOfBirth = Annotated[date, AfterValidator(validate_date_of_birth)]


class DocumentItem(RequestModel):
    name: str = Field(..., min_length=1, max_length=100)
    checked: bool = False


class PhaseProgress(ORMModel):
    phase: Phase
    status: PhaseStatus
    sessions_completed: int
    sessions_plan: int
    exam_passed: bool = False
    exam_attempts: int = 0


class CandidateCreate(RequestModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: Email
    phone: Phone
    license_type: LicenseType
    address: Optional[str] = Field(None, max_length=200)
    date_of_birth: Optional[DateOfBirth] = None
    total_fee: Optional[float] = Field(None, ge=0)
    documents: Optional[List[DocumentItem]] = None


class CandidateUpdate(UpdateModel):
    non_nullable = {"name", "email", "phone", "license_type", "status", "progress", "total_fee", "documents"}

    # Updates only need a non-empty name
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[Email] = None
    phone: Optional[Phone] = None
    license_type: Optional[LicenseType] = None
    address: Optional[str] = Field(None, max_length=200)
    date_of_birth: Optional[DateOfBirth] = None
    status: Optional[CandidateStatus] = None
    progress: Optional[Phase] = None
    total_fee: Optional[float] = Field(None, ge=0)
    documents: Optional[List[DocumentItem]] = None


class CandidateProgressUpdate(RequestModel):
    progress: Phase


class CandidateResponse(TimestampedModel):
    id: str
    name: str
    email: str
    phone: str
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    license_type: LicenseType
    registration_date: datetime
    status: CandidateStatus
    progress: Phase
    total_fee: float
    paid_amount: float
    remaining_amount: float
    documents: List[DocumentItem] = []
    phases: List[PhaseProgress] = []
