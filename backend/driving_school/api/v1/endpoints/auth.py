from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from driving_school.core.database import get_db
from driving_school.core.rate_limiter import login_rate_limit, password_reset_rate_limit
from driving_school.models.admin import Admin
from driving_school.modules.auth.dependencies import get_current_admin
from driving_school.schemas.auth import (
    AdminResponse,
    ForgotPasswordData,
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    TokenData,
    UpdateEmailRequest,
    UpdateNameRequest,
    UpdatePasswordRequest,
)
from driving_school.schemas.common import DataResponse, MessageResponse
from driving_school.services.auth_service import auth_service
from driving_school.services.email_service import email_service

router = APIRouter()


def token_data(admin: Admin, token: str) -> TokenData:
    return TokenData(id=str(admin.id), name=admin.name, email=admin.email, token=token)


@router.post("/login", response_model=DataResponse[TokenData])
@login_rate_limit()
async def login(
    request: Request,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """Login with email and password (rate limited: 5 per 15 minutes per IP)"""
    admin, token = await auth_service.authenticate(
        db, credentials.email, credentials.password, credentials.username
    )
    return DataResponse(data=token_data(admin, token))


@router.get("/me", response_model=DataResponse[AdminResponse])
async def get_me(current_admin: Admin = Depends(get_current_admin)):
    """Get the logged-in admin"""
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
    """Change the login email; the current password confirms the change"""
    admin = await auth_service.update_email(db, current_admin, body.email, body.current_password)
    return DataResponse(data=AdminResponse.model_validate(admin), message="Email updated successfully")


@router.put("/password", response_model=DataResponse[TokenData])
async def update_password(
    body: UpdatePasswordRequest,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Change password and receive a fresh token"""
    admin, token = await auth_service.update_password(
        db, current_admin, body.current_password, body.new_password
    )
    return DataResponse(data=token_data(admin, token), message="Password updated successfully")


@router.post("/logout", response_model=MessageResponse)
async def logout(current_admin: Admin = Depends(get_current_admin)):
    """Tokens are stateless; the client simply discards its token"""
    return MessageResponse(message="Logged out successfully")


@router.post("/forgot-password")
@password_reset_rate_limit()
async def forgot_password(
    request: Request,
    body: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Start a password reset.

    Always answers 200 so the response does not reveal which emails have
    an account. Without a mail server the reset link is returned in data.
    """
    token = await auth_service.request_password_reset(db, body.email)

    if token is not None:
        return DataResponse[ForgotPasswordData](
            data=ForgotPasswordData(reset_url=email_service.build_reset_link(token), token=token),
            message="Email service is not configured; use the reset link below",
        )
    return MessageResponse(
        message="If an account exists with this email, you will receive password reset instructions."
    )


@router.post("/reset-password", response_model=DataResponse[TokenData])
@password_reset_rate_limit()
async def reset_password(
    request: Request,
    body: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db)
):
    admin, token = await auth_service.reset_password(db, body.token, body.password)
    return DataResponse(data=token_data(admin, token), message="Password reset successful")
