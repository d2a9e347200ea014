from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from driving_school.core.database import get_db
from driving_school.models.admin import Admin
from driving_school.models.payment import PaymentStatus
from driving_school.modules.auth.dependencies import get_current_admin
from driving_school.schemas.common import DataResponse, MessageResponse
from driving_school.schemas.payment import (
    CandidatePaymentList,
    PaymentCreate,
    PaymentList,
    PaymentResponse,
    PaymentUpdate,
    PendingPaymentCount,
    PendingPaymentList,
)
from driving_school.services.payment_service import payment_service
from driving_school.utils.pagination import PaginationParams, pagination_params

router = APIRouter()


@router.get("", response_model=PaymentList)
async def list_payments(
    status_filter: Optional[PaymentStatus] = Query(None, alias="status"),
    candidate_id: Optional[str] = Query(None),
    params: PaginationParams = Depends(pagination_params),
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    page = await payment_service.list_payments(db, params, status=status_filter, candidate_id=candidate_id)
    return PaymentList(
        count=len(page.items),
        data=[PaymentResponse.model_validate(p) for p in page.items],
        pagination=page.meta(),
    )


@router.get("/pending", response_model=PendingPaymentList)
async def pending_payments(
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    payments, total = await payment_service.pending_payments(db)
    return PendingPaymentList(
        count=len(payments),
        total_pending_amount=total,
        data=[PaymentResponse.model_validate(p) for p in payments],
    )


@router.get("/pending/count", response_model=DataResponse[PendingPaymentCount])
async def pending_payments_count(
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    count, total = await payment_service.pending_totals(db)
    return DataResponse(data=PendingPaymentCount(count=count, total_pending_amount=total))


@router.get("/candidate/{candidate_id}", response_model=CandidatePaymentList)
async def candidate_payments(
    candidate_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """All payments of a candidate with paid/pending totals"""
    payments, summary = await payment_service.candidate_payments(db, candidate_id)
    return CandidatePaymentList(
        count=len(payments),
        summary=summary,
        data=[PaymentResponse.model_validate(p) for p in payments],
    )


@router.get("/{payment_id}", response_model=DataResponse[PaymentResponse])
async def get_payment(
    payment_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    payment = await payment_service.get_payment(db, payment_id)
    return DataResponse(data=PaymentResponse.model_validate(payment))


@router.post("", response_model=DataResponse[PaymentResponse], status_code=status.HTTP_201_CREATED)
async def create_payment(
    body: PaymentCreate,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    payment = await payment_service.create_payment(db, body)
    return DataResponse(data=PaymentResponse.model_validate(payment), message="Payment recorded successfully")


@router.put("/{payment_id}", response_model=DataResponse[PaymentResponse])
async def update_payment(
    payment_id: str,
    body: PaymentUpdate,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    payment = await payment_service.update_payment(db, payment_id, body)
    return DataResponse(data=PaymentResponse.model_validate(payment), message="Payment updated successfully")


@router.delete("/{payment_id}", response_model=MessageResponse)
async def delete_payment(
    payment_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    await payment_service.delete_payment(db, payment_id)
    return MessageResponse(message="Payment deleted successfully")


@router.put("/{payment_id}/mark-paid", response_model=DataResponse[PaymentResponse])
async def mark_paid(
    payment_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    payment = await payment_service.mark_paid(db, payment_id)
    return DataResponse(data=PaymentResponse.model_validate(payment), message="Payment marked as paid")
