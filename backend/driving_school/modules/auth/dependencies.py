from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from driving_school.core.database import get_db
from driving_school.core.exceptions import AuthenticationError, InvalidTokenError, TokenExpiredError
from driving_school.core.logging_config import logger, set_admin_id
from driving_school.core.security import decode_token
from driving_school.models.admin import Admin
from driving_school.services.auth_service import auth_service

# auto_error=False so a missing header gets our own 401 envelope instead of a 403
security = HTTPBearer(auto_error=False)


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Admin:
    """Get the admin identified by the bearer token"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()

    try:
        payload = decode_token(credentials.credentials)
    except TokenExpiredError:
        logger.log_auth_event("token", False, reason="expired")
        raise
    except InvalidTokenError:
        logger.log_auth_event("token", False, reason="invalid")
        raise AuthenticationError()

    admin = await auth_service.get_admin(db, payload["sub"])
    if not admin:
        logger.log_auth_event("token", False, reason="admin not found")
        raise AuthenticationError()

    set_admin_id(str(admin.id))
    return admin
