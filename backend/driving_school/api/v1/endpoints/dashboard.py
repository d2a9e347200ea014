from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from driving_school.core.database import get_db
from driving_school.models.admin import Admin
from driving_school.modules.auth.dependencies import get_current_admin
from driving_school.schemas.common import DataResponse
from driving_school.schemas.dashboard import DashboardStats
from driving_school.services.dashboard_service import dashboard_service

router = APIRouter()


@router.get("/stats", response_model=DataResponse[DashboardStats])
async def get_stats(
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Totals for the dashboard cards"""
    stats = await dashboard_service.get_stats(db)
    return DataResponse(data=stats)
