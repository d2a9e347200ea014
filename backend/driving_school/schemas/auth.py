from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from driving_school.core.config import settings
from driving_school.schemas.common import RequestModel, ORMModel, Email


class LoginRequest(RequestModel):
    email: Email
    password: str = Field(..., min_length=1)
    username: Optional[str] = None


class ForgotPasswordRequest(RequestModel):
    email: Email


class ResetPasswordRequest(RequestModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=settings.MIN_PASSWORD_LENGTH)


class UpdateNameRequest(RequestModel):
    name: str = Field(..., min_length=2, max_length=100)


class UpdateEmailRequest(RequestModel):
    email: Email
    current_password: str = Field(..., min_length=1)


class UpdatePasswordRequest(RequestModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=settings.MIN_PASSWORD_LENGTH)


class AdminResponse(ORMModel):
    id: str
    name: str
    email: str
    last_password_change: Optional[datetime] = None
    created_at: Optional[datetime] = None


class TokenData(ORMModel):
    """Admin profile plus a bearer token"""
    id: str
    name: str
    email: str
    token: str


class ForgotPasswordData(BaseModel):
    """Returned only when no mail server is configured"""
    reset_url: str
    token: str
