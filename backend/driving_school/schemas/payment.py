from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date as date_type

from driving_school.models.payment import PaymentMethod, PaymentStatus
from driving_school.schemas.common import (
    CandidateBrief,
    PaginationMeta,
    RequestModel,
    TimestampedModel,
    UpdateModel,
)


class PaymentCreate(RequestModel):
    candidate_id: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0)
    method: PaymentMethod = PaymentMethod.CASH
    status: PaymentStatus = PaymentStatus.PENDING
    date: Optional[date_type] = None
    payment_plan_id: Optional[str] = None
    installment_number: Optional[int] = Field(None, ge=1)


class PaymentUpdate(UpdateModel):
    non_nullable = {"candidate_id", "amount", "method", "status", "date"}

    candidate_id: Optional[str] = Field(None, min_length=1)
    amount: Optional[float] = Field(None, ge=0)
    method: Optional[PaymentMethod] = None
    status: Optional[PaymentStatus] = None
    date: Optional[date_type] = None
    payment_plan_id: Optional[str] = None
    installment_number: Optional[int] = Field(None, ge=1)


class PaymentResponse(TimestampedModel):
    id: str
    candidate_id: str
    payment_plan_id: Optional[str] = None
    installment_number: Optional[int] = None
    amount: float
    method: PaymentMethod
    status: PaymentStatus
    date: date_type
    candidate: Optional[CandidateBrief] = None


class PendingPaymentList(BaseModel):
    success: bool = True
    count: int
    total_pending_amount: float
    data: List[PaymentResponse]


class PaymentSummary(BaseModel):
    total_paid: float
    total_pending: float
    payment_count: int


class CandidatePaymentList(BaseModel):
    success: bool = True
    count: int
    summary: PaymentSummary
    data: List[PaymentResponse]


class PaymentList(BaseModel):
    success: bool = True
    count: int
    data: List[PaymentResponse]
    pagination: PaginationMeta


# ==========================================
# Payment plans
# ==========================================

class PaymentPlanCreate(RequestModel):
    name: str = Field(..., min_length=2, max_length=100)
    number_of_installments: int = Field(..., ge=1, le=48)
    total_amount: float = Field(..., ge=0)


class PaymentPlanUpdate(UpdateModel):
    non_nullable = {"name", "number_of_installments", "total_amount"}

    name: Optional[str] = Field(None, min_length=2, max_length=100)
    number_of_installments: Optional[int] = Field(None, ge=1, le=48)
    total_amount: Optional[float] = Field(None, ge=0)


class PaymentPlanResponse(TimestampedModel):
    id: str
    name: str
    number_of_installments: int
    total_amount: float
    installment_amount: float


class PendingPaymentCount(BaseModel):
    count: int
    total_pending_amount: float
