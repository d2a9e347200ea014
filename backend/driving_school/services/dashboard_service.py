"""Dashboard Service - headline numbers for the admin home page"""

from sqlalchemy.ext.asyncio import AsyncSession

from driving_school.schemas.dashboard import DashboardStats, PendingPaymentStats
from driving_school.services.candidate_service import candidate_service
from driving_school.services.instructor_service import instructor_service
from driving_school.services.payment_service import payment_service
from driving_school.services.vehicle_service import vehicle_service


class DashboardService:

    async def get_stats(self, db: AsyncSession) -> DashboardStats:
        pending_count, pending_amount = await payment_service.pending_totals(db)
        return DashboardStats(
            total_candidates=await candidate_service.count_candidates(db),
            total_instructors=await instructor_service.count_instructors(db),
            total_vehicles=await vehicle_service.count_vehicles(db),
            pending_payments=PendingPaymentStats(count=pending_count, total_amount=pending_amount),
        )


dashboard_service = DashboardService()
