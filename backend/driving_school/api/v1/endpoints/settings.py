from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from driving_school.core.database import get_db
from driving_school.models.admin import Admin
from driving_school.modules.auth.dependencies import get_current_admin
from driving_school.schemas.auth import (
    AdminResponse,
    UpdateEmailRequest,
    UpdateNameRequest,
    UpdatePasswordRequest,
)
from driving_school.schemas.common import DataResponse, MessageResponse
from driving_school.services.auth_service import auth_service

router = APIRouter()


@router.get("", response_model=DataResponse[AdminResponse])
async def get_settings(current_admin: Admin = Depends(get_current_admin)):
    """Admin profile including the time of the last password change"""
    return DataResponse(data=AdminResponse.model_validate(current_admin))


@router.put("/name", response_model=DataResponse[AdminResponse])
async def update_name(
    body: UpdateNameRequest,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    admin = await auth_service.update_name(db, current_admin, body.name)
    return DataResponse(data=AdminResponse.model_validate(admin), message="Name updated successfully")


@router.put("/email", response_model=DataResponse[AdminResponse])
async def update_email(
    body: UpdateEmailRequest,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    admin = await auth_service.update_email(db, current_admin, body.email, body.current_password)
    return DataResponse(data=AdminResponse.model_validate(admin), message="Email updated successfully")


@router.put("/password", response_model=MessageResponse)
async def update_password(
    body: UpdatePasswordRequest,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    await auth_service.update_password(db, current_admin, body.current_password, body.new_password)
    return MessageResponse(message="Password updated successfully")
