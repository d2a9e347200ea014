from pydantic import BaseModel


class PendingPaymentStats(BaseModel):
    count: int
    total_amount: float


class DashboardStats(BaseModel):
    total_candidates: int
    total_instructors: int
    total_vehicles: int
    pending_payments: PendingPaymentStats
