from pydantic import AfterValidator, BaseModel, Field
from typing import Annotated, List, Optional
from datetime import date as date_type

from driving_school.models.candidate import LicenseType
from driving_school.models.vehicle import VehicleStatus, MaintenanceType
from driving_school.schemas.common import (
    InstructorBrief,
    PaginationMeta,
    RequestModel,
    TimestampedModel,
    UpdateModel,
)


LicensePlate = Annotated[str, Field(min_length=1, max_length=20), AfterValidator(str.upper)]


class VehicleCreate(RequestModel):
    brand: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    license_plate: LicensePlate
    category: Optional[LicenseType] = None
    status: VehicleStatus = VehicleStatus.ACTIVE


class VehicleUpdate(UpdateModel):
    non_nullable = {"brand", "model", "license_plate", "status"}

    brand: Optional[str] = Field(None, min_length=1, max_length=100)
    model: Optional[str] = Field(None, min_length=1, max_length=100)
    license_plate: Optional[LicensePlate] = None
    category: Optional[LicenseType] = None
    status: Optional[VehicleStatus] = None


class AssignInstructorRequest(RequestModel):
    """instructor_id null (or omitted) removes the current assignment"""
    instructor_id: Optional[str] = None


class VehicleResponse(TimestampedModel):
    id: str
    brand: str
    model: str
    license_plate: str
    category: Optional[LicenseType] = None
    assigned_instructor_id: Optional[str] = None
    assigned_instructor: Optional[InstructorBrief] = None
    status: VehicleStatus


# ==========================================
# Maintenance history
# ==========================================

class MaintenanceLogCreate(RequestModel):
    date: date_type
    type: MaintenanceType
    description: Optional[str] = Field(None, max_length=1000)
    cost: float = Field(0.0, ge=0)
    performed_by: Optional[str] = Field(None, max_length=100)


class MaintenanceLogUpdate(UpdateModel):
    non_nullable = {"date", "type", "cost"}

    date: Optional[date_type] = None
    type: Optional[MaintenanceType] = None
    description: Optional[str] = Field(None, max_length=1000)
    cost: Optional[float] = Field(None, ge=0)
    performed_by: Optional[str] = Field(None, max_length=100)


class MaintenanceLogResponse(TimestampedModel):
    id: str
    vehicle_id: str
    date: date_type
    type: MaintenanceType
    description: Optional[str] = None
    cost: float
    performed_by: Optional[str] = None


class MaintenanceLogList(BaseModel):
    success: bool = True
    count: int
    total_cost: float
    data: List[MaintenanceLogResponse]
    pagination: PaginationMeta
