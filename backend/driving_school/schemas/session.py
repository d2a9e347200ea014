from pydantic import Field, field_validator
from typing import Optional
from datetime import date as date_type

from driving_school.models.candidate import Phase
from driving_school.models.session import SessionStatus
from driving_school.schemas.common import (
    CandidateBrief,
    InstructorBrief,
    RequestModel,
    Time,
    TimestampedModel,
    UpdateModel,
    VehicleBrief,
)


class SessionCreate(RequestModel):
    candidate_id: str = Field(..., min_length=1)
    instructor_id: str = Field(..., min_length=1)
    date: date_type
    time: Time
    lesson_type: Phase
    vehicle_id: Optional[str] = None


class SessionUpdate(UpdateModel):
    non_nullable = {"candidate_id", "instructor_id", "date", "time", "lesson_type", "status"}

    candidate_id: Optional[str] = Field(None, min_length=1)
    instructor_id: Optional[str] = Field(None, min_length=1)
    date: Optional[date_type] = None
    time: Optional[Time] = None
    lesson_type: Optional[Phase] = None
    vehicle_id: Optional[str] = None
    status: Optional[SessionStatus] = None

    @field_validator("status")
    @classmethod
    def status_is_editable(cls, v: Optional[SessionStatus]) -> Optional[SessionStatus]:
        # Completion goes through PUT /schedule/{id}/complete
        if v == SessionStatus.COMPLETED:
            raise ValueError("status must be scheduled or cancelled")
        return v


class SessionResponse(TimestampedModel):
    id: str
    candidate_id: str
    instructor_id: str
    vehicle_id: Optional[str] = None
    lesson_type: Phase
    date: date_type
    time: str
    status: SessionStatus
    candidate: Optional[CandidateBrief] = None
    instructor: Optional[InstructorBrief] = None
    vehicle: Optional[VehicleBrief] = None
