from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional
from datetime import date as date_type

from driving_school.models.candidate import Phase
from driving_school.models.exam import ExamStatus
from driving_school.schemas.common import (
    CandidateBrief,
    InstructorBrief,
    RequestModel,
    Time,
    TimestampedModel,
    UpdateModel,
)


class ExamCreate(RequestModel):
    candidate_id: str = Field(..., min_length=1)
    instructor_id: str = Field(..., min_length=1)
    exam_type: Phase
    date: date_type
    time: Time
    course_id: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)


class ExamUpdate(UpdateModel):
    non_nullable = {"instructor_id", "date", "time"}

    instructor_id: Optional[str] = Field(None, min_length=1)
    date: Optional[date_type] = None
    time: Optional[Time] = None
    course_id: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)


class ExamResultRequest(RequestModel):
    result: ExamStatus
    score: Optional[float] = Field(None, ge=0, le=100)
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("result")
    @classmethod
    def result_is_final(cls, v: ExamStatus) -> ExamStatus:
        if v not in (ExamStatus.PASSED, ExamStatus.FAILED):
            raise ValueError("result must be passed or failed")
        return v


class ExamResponse(TimestampedModel):
    id: str
    candidate_id: str
    instructor_id: str
    course_id: Optional[str] = None
    exam_type: Phase
    date: date_type
    time: str
    status: ExamStatus
    attempt_number: int
    notes: Optional[str] = None
    candidate: Optional[CandidateBrief] = None
    instructor: Optional[InstructorBrief] = None


class ExamEligibility(BaseModel):
    can_take: bool
    reason: Optional[str] = None
    next_available_date: Optional[date_type] = None


class ExamTypeHistory(BaseModel):
    attempts: int
    passed: bool
    exams: List[ExamResponse]


class ExamHistory(BaseModel):
    success: bool = True
    count: int
    data: Dict[str, ExamTypeHistory]
