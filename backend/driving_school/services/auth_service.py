"""
Auth Service - admin login, profile settings and password reset

The password reset flow is stateless: the emailed token is a short-lived JWT
that also carries the admin's last password change, so a token stops working
as soon as the password it was issued for has been replaced.
"""

from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from driving_school.core.exceptions import (
    AuthenticationError,
    DrivingSchoolError,
    DuplicateFieldError,
    ValidationError,
)
from driving_school.core.logging_config import get_logger
from driving_school.core.security import (
    PASSWORD_RESET_TOKEN_TYPE,
    create_access_token,
    create_password_reset_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from driving_school.models.admin import Admin
from driving_school.services.email_service import email_service

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_RESET_TOKEN = "Token is invalid or has expired"


def _password_stamp(admin: Admin) -> str:
    return admin.last_password_change.isoformat() if admin.last_password_change else ""


class AuthService:
    """Service for admin authentication and account settings"""

    async def get_admin(self, db: AsyncSession, admin_id: str) -> Optional[Admin]:
        result = await db.execute(select(Admin).where(Admin.id == admin_id))
        return result.scalar_one_or_none()

    async def get_admin_by_email(self, db: AsyncSession, email: str) -> Optional[Admin]:
        result = await db.execute(select(Admin).where(Admin.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def create_admin(self, db: AsyncSession, name: str, email: str, password: str) -> Admin:
        """Create an admin account (used by provisioning and tests)"""
        admin = Admin(
            name=name.strip(),
            email=email.strip().lower(),
            hashed_password=get_password_hash(password),
            last_password_change=datetime.utcnow(),
        )
        db.add(admin)
        await db.commit()
        await db.refresh(admin)
        logger.info(f"Created admin {admin.email}")
        return admin

    def issue_token(self, admin: Admin) -> str:
        return create_access_token({"sub": str(admin.id), "email": admin.email})

    async def authenticate(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        username: Optional[str] = None
    ) -> Tuple[Admin, str]:
        """
        Check credentials and return the admin with a fresh access token.

        When a username is supplied it must match the admin name
        (case-insensitive). Every failure yields the same message.
        """
        admin = await self.get_admin_by_email(db, email)

        if not admin:
            logger.log_auth_event("login", False, email=email, reason="unknown email")
            raise AuthenticationError(INVALID_CREDENTIALS)

        if username is not None and admin.name.strip().lower() != username.strip().lower():
            logger.log_auth_event("login", False, email=email, reason="username mismatch")
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not verify_password(password, admin.hashed_password):
            logger.log_auth_event("login", False, email=email, reason="wrong password")
            raise AuthenticationError(INVALID_CREDENTIALS)

        logger.log_auth_event("login", True, email=admin.email)
        return admin, self.issue_token(admin)

    # ==================== SETTINGS ====================

    async def update_name(self, db: AsyncSession, admin: Admin, name: str) -> Admin:
        admin.name = name.strip()
        await db.commit()
        await db.refresh(admin)
        return admin

    async def update_email(self, db: AsyncSession, admin: Admin, email: str, current_password: str) -> Admin:
        if not verify_password(current_password, admin.hashed_password):
            raise AuthenticationError("Current password is incorrect")

        email = email.strip().lower()
        if email != admin.email:
            existing = await db.execute(
                select(func.count()).select_from(Admin).where(Admin.email == email, Admin.id != admin.id)
            )
            if existing.scalar():
                raise DuplicateFieldError("email")

        admin.email = email
        await db.commit()
        await db.refresh(admin)
        logger.log_auth_event("email_change", True, email=admin.email)
        return admin

    async def update_password(
        self,
        db: AsyncSession,
        admin: Admin,
        current_password: str,
        new_password: str
    ) -> Tuple[Admin, str]:
        if not verify_password(current_password, admin.hashed_password):
            logger.log_auth_event("password_change", False, email=admin.email, reason="wrong current password")
            raise AuthenticationError("Current password is incorrect")

        admin.hashed_password = get_password_hash(new_password)
        admin.last_password_change = datetime.utcnow()
        await db.commit()
        await db.refresh(admin)

        logger.log_auth_event("password_change", True, email=admin.email)
        return admin, self.issue_token(admin)

    # ==================== PASSWORD RESET ====================

    async def request_password_reset(self, db: AsyncSession, email: str) -> Optional[str]:
        """
        Issue a reset token for a known admin and email the link.

        Returns the token only when it could not be emailed because no SMTP
        server is configured; returns None otherwise (including for unknown
        addresses, which are never revealed to the caller).
        """
        admin = await self.get_admin_by_email(db, email)
        if not admin:
            logger.log_auth_event("password_reset_request", False, email=email, reason="unknown email")
            return None

        token = create_password_reset_token(str(admin.id), admin.email, _password_stamp(admin))

        if not email_service.is_configured:
            logger.warning("SMTP not configured; returning reset link in the response")
            return token

        sent = await email_service.send_password_reset_email(admin.email, admin.name, token)
        if not sent:
            raise DrivingSchoolError("There was an error sending the email. Please try again later.")

        logger.log_auth_event("password_reset_request", True, email=admin.email)
        return None

    async def reset_password(self, db: AsyncSession, token: str, new_password: str) -> Tuple[Admin, str]:
        try:
            payload = decode_token(token, expected_type=PASSWORD_RESET_TOKEN_TYPE)
        except AuthenticationError:
            raise ValidationError(INVALID_RESET_TOKEN, field="token")

        admin = await self.get_admin(db, payload["sub"])
        if not admin or payload.get("pwd") != _password_stamp(admin):
            raise ValidationError(INVALID_RESET_TOKEN, field="token")

        admin.hashed_password = get_password_hash(new_password)
        admin.last_password_change = datetime.utcnow()
        await db.commit()
        await db.refresh(admin)

        logger.log_auth_event("password_reset", True, email=admin.email)
        return admin, self.issue_token(admin)


auth_service = AuthService()
