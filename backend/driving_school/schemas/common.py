"""Shared request/response building blocks"""
import re
from datetime import datetime
from typing import Annotated, Any, ClassVar, Dict, Generic, List, Optional, Set, TypeVar

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, EmailStr, model_validator

T = TypeVar('T')

TIME_PATTERN = re.compile(r'^([01][0-9]|2[0-3]):[0-5][0-9]$')
PHONE_PATTERN = re.compile(r'^[0-9]{10,15}$')


def validate_time(value: Optional[str]) -> Optional[str]:
    if value is not None and not TIME_PATTERN.match(value):
        raise ValueError("time must be in HH:MM format (00:00-23:59)")
    return value


def validate_phone(value: Optional[str]) -> Optional[str]:
    if value is not None and not PHONE_PATTERN.match(value):
        raise ValueError("phone must contain 10 to 15 digits")
    return value


def normalize_email(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


# Reusable field types
Email = Annotated[EmailStr, BeforeValidator(normalize_email)]
Time = Annotated[str, AfterValidator(validate_time)]
Phone = Annotated[str, AfterValidator(validate_phone)]


class RequestModel(BaseModel):
    """Base for request bodies: strings are trimmed, unknown keys ignored"""
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class UpdateModel(RequestModel):
    """
    Base for partial updates. Only fields present in the body are applied,
    and fields listed in ``non_nullable`` may not be sent as null.
    """
    non_nullable: ClassVar[Set[str]] = set()

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        nulls = sorted(
            name for name in self.model_fields_set
            if name in self.non_nullable and getattr(self, name) is None
        )
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class TimestampedModel(ORMModel):
    created_at: datetime
    updated_at: Optional[datetime] = None


# ==========================================
# Envelopes
# ==========================================

class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class DataResponse(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: T


class ListResponse(BaseModel, Generic[T]):
    success: bool = True
    count: int
    data: List[T]
    pagination: Optional[PaginationMeta] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class CountData(BaseModel):
    total: int


# ==========================================
# Brief views embedded in other responses
# ==========================================

class CandidateBrief(ORMModel):
    id: str
    name: str
    email: str
    phone: str


class InstructorBrief(ORMModel):
    id: str
    name: str
    email: str
    phone: str


class VehicleBrief(ORMModel):
    id: str
    brand: str
    model: str
    license_plate: str
