from pydantic import Field
from typing import Optional

from driving_school.models.course import CourseType
from driving_school.schemas.common import RequestModel, TimestampedModel, UpdateModel


class CourseCreate(RequestModel):
    type: CourseType
    title: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    duration: float = Field(..., gt=0, description="Duration in hours")
    price: float = Field(0.0, ge=0)


class CourseUpdate(UpdateModel):
    non_nullable = {"type", "title", "duration", "price"}

    type: Optional[CourseType] = None
    title: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    duration: Optional[float] = Field(None, gt=0)
    price: Optional[float] = Field(None, ge=0)


class CourseResponse(TimestampedModel):
    id: str
    type: CourseType
    title: str
    description: Optional[str] = None
    duration: float
    price: float
