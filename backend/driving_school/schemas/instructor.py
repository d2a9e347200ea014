from pydantic import Field, model_validator
from typing import List, Optional
from datetime import date as date_type

from driving_school.models.instructor import InstructorStatus
from driving_school.schemas.common import (
    Email,
    Phone,
    RequestModel,
    Time,
    TimestampedModel,
    UpdateModel,
    VehicleBrief,
)


class AvailabilityWindow(RequestModel):
    date: date_type
    start_time: Time
    end_time: Time

    @model_validator(mode="after")
    def check_window(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class InstructorCreate(RequestModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: Email
    phone: Phone
    address: Optional[str] = Field(None, max_length=200)
    specialization: Optional[str] = Field(None, max_length=100)
    hire_date: Optional[date_type] = None
    availability: List[AvailabilityWindow] = []


class InstructorUpdate(UpdateModel):
    non_nullable = {"name", "email", "phone", "status", "availability"}

    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[Email] = None
    phone: Optional[Phone] = None
    address: Optional[str] = Field(None, max_length=200)
    specialization: Optional[str] = Field(None, max_length=100)
    hire_date: Optional[date_type] = None
    status: Optional[InstructorStatus] = None
    availability: Optional[List[AvailabilityWindow]] = None


class AssignVehicleRequest(RequestModel):
    """vehicle_id null (or omitted) removes the current assignment"""
    vehicle_id: Optional[str] = None


class AvailabilityResponse(RequestModel):
    date: date_type
    start_time: str
    end_time: str


class InstructorResponse(TimestampedModel):
    id: str
    name: str
    email: str
    phone: str
    address: Optional[str] = None
    specialization: Optional[str] = None
    hire_date: Optional[date_type] = None
    assigned_vehicle_id: Optional[str] = None
    assigned_vehicle: Optional[VehicleBrief] = None
    status: InstructorStatus
    availability: List[AvailabilityResponse] = []
