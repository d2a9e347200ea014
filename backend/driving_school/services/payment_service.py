"""
Payment Service - candidate payments and instalment plans

A candidate's ``paid_amount`` always equals the sum of that candidate's
payments in status paid; every write below keeps it in step.
"""

from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from driving_school.core.exceptions import BusinessRuleError
from driving_school.core.logging_config import get_logger
from driving_school.models.candidate import Candidate
from driving_school.models.enrollment import Enrollment
from driving_school.models.payment import Payment, PaymentPlan, PaymentStatus
from driving_school.schemas.payment import (
    PaymentCreate,
    PaymentPlanCreate,
    PaymentPlanUpdate,
    PaymentSummary,
    PaymentUpdate,
)
from driving_school.utils.db import apply_changes, get_or_404
from driving_school.utils.pagination import Page, PaginationParams, paginate

logger = get_logger(__name__)


def _paid_share(payment: Payment) -> float:
    return payment.amount if payment.status == PaymentStatus.PAID else 0.0


async def _credit_candidate(db: AsyncSession, candidate_id: str, amount: float) -> None:
    """Add (or with a negative amount, remove) money from a candidate's paid total"""
    if not amount:
        return
    candidate = await db.get(Candidate, candidate_id)
    if candidate is not None:
        candidate.paid_amount = max(0.0, round((candidate.paid_amount or 0.0) + amount, 2))


class PaymentService:
    """Service for payments"""

    async def list_payments(
        self,
        db: AsyncSession,
        params: PaginationParams,
        status: Optional[PaymentStatus] = None,
        candidate_id: Optional[str] = None
    ) -> Page:
        query = select(Payment)
        if status is not None:
            query = query.where(Payment.status == status)
        if candidate_id:
            query = query.where(Payment.candidate_id == candidate_id)

        query = query.order_by(Payment.date.desc(), Payment.created_at.desc())
        return await paginate(db, query, params)

    async def pending_payments(self, db: AsyncSession) -> Tuple[List[Payment], float]:
        result = await db.execute(
            select(Payment)
            .where(Payment.status == PaymentStatus.PENDING)
            .order_by(Payment.date.desc(), Payment.created_at.desc())
        )
        payments = list(result.scalars().all())
        return payments, sum(p.amount for p in payments)

    async def pending_totals(self, db: AsyncSession) -> Tuple[int, float]:
        """Number and total amount of pending payments"""
        result = await db.execute(
            select(func.count(Payment.id), func.coalesce(func.sum(Payment.amount), 0.0))
            .where(Payment.status == PaymentStatus.PENDING)
        )
        count, total = result.one()
        return count or 0, float(total or 0.0)

    async def candidate_payments(self, db: AsyncSession, candidate_id: str) -> Tuple[List[Payment], PaymentSummary]:
        await get_or_404(db, Candidate, candidate_id, "Candidate")

        result = await db.execute(
            select(Payment)
            .where(Payment.candidate_id == candidate_id)
            .order_by(Payment.date.desc(), Payment.created_at.desc())
        )
        payments = list(result.scalars().all())

        summary = PaymentSummary(
            total_paid=sum(p.amount for p in payments if p.status == PaymentStatus.PAID),
            total_pending=sum(p.amount for p in payments if p.status == PaymentStatus.PENDING),
            payment_count=len(payments),
        )
        return payments, summary

    async def get_payment(self, db: AsyncSession, payment_id: str) -> Payment:
        return await get_or_404(db, Payment, payment_id, "Payment")

    async def create_payment(self, db: AsyncSession, data: PaymentCreate) -> Payment:
        candidate = await get_or_404(db, Candidate, data.candidate_id, "Candidate")
        if data.payment_plan_id:
            await get_or_404(db, PaymentPlan, data.payment_plan_id, "Payment plan")

        payment = Payment(
            candidate_id=candidate.id,
            payment_plan_id=data.payment_plan_id,
            installment_number=data.installment_number,
            amount=data.amount,
            method=data.method,
            status=data.status,
            date=data.date or date.today(),
        )
        db.add(payment)
        await _credit_candidate(db, candidate.id, _paid_share(payment))
        await db.commit()

        logger.info(f"Recorded {payment.status.value} payment {payment.id} of {payment.amount} for {candidate.id}")
        return await self.get_payment(db, payment.id)

    async def update_payment(self, db: AsyncSession, payment_id: str, data: PaymentUpdate) -> Payment:
        payment = await self.get_payment(db, payment_id)
        changes = data.changes()

        if "candidate_id" in changes:
            await get_or_404(db, Candidate, changes["candidate_id"], "Candidate")
        if changes.get("payment_plan_id"):
            await get_or_404(db, PaymentPlan, changes["payment_plan_id"], "Payment plan")

        old_candidate, old_share = payment.candidate_id, _paid_share(payment)
        apply_changes(payment, changes)

        await _credit_candidate(db, old_candidate, -old_share)
        await _credit_candidate(db, payment.candidate_id, _paid_share(payment))
        await db.commit()
        return await self.get_payment(db, payment_id)

    async def delete_payment(self, db: AsyncSession, payment_id: str) -> None:
        payment = await self.get_payment(db, payment_id)
        await _credit_candidate(db, payment.candidate_id, -_paid_share(payment))
        await db.delete(payment)
        await db.commit()
        logger.info(f"Deleted payment {payment_id}")

    async def mark_paid(self, db: AsyncSession, payment_id: str) -> Payment:
        payment = await self.get_payment(db, payment_id)
        if payment.status == PaymentStatus.PAID:
            raise BusinessRuleError("Payment is already marked as paid")

        payment.status = PaymentStatus.PAID
        payment.date = date.today()
        await _credit_candidate(db, payment.candidate_id, payment.amount)
        await db.commit()

        logger.info(f"Payment {payment_id} marked as paid")
        return await self.get_payment(db, payment_id)


class PaymentPlanService:
    """Service for instalment plans"""

    async def list_plans(self, db: AsyncSession, params: PaginationParams) -> Page:
        query = select(PaymentPlan).order_by(PaymentPlan.created_at.desc())
        return await paginate(db, query, params)

    async def get_plan(self, db: AsyncSession, plan_id: str) -> PaymentPlan:
        return await get_or_404(db, PaymentPlan, plan_id, "Payment plan")

    async def create_plan(self, db: AsyncSession, data: PaymentPlanCreate) -> PaymentPlan:
        plan = PaymentPlan(**data.model_dump())
        db.add(plan)
        await db.commit()
        await db.refresh(plan)
        logger.info(f"Created payment plan {plan.id} ({plan.name})")
        return plan

    async def update_plan(self, db: AsyncSession, plan_id: str, data: PaymentPlanUpdate) -> PaymentPlan:
        plan = await self.get_plan(db, plan_id)
        apply_changes(plan, data.changes())
        await db.commit()
        await db.refresh(plan)
        return plan

    async def delete_plan(self, db: AsyncSession, plan_id: str) -> None:
        plan = await self.get_plan(db, plan_id)

        in_use = await db.execute(
            select(func.count()).select_from(Enrollment).where(Enrollment.payment_plan_id == plan.id)
        )
        if in_use.scalar():
            raise BusinessRuleError("Cannot delete a payment plan used by enrollments")

        await db.delete(plan)
        await db.commit()
        logger.info(f"Deleted payment plan {plan_id}")


payment_service = PaymentService()
payment_plan_service = PaymentPlanService()
