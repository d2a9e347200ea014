"""
Exception handlers that turn every failure into the API error envelope:

    {"success": false, "error": "<message>"}

Registered once on the FastAPI app by ``register_exception_handlers``.
"""

import re
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from driving_school.core.config import settings
from driving_school.core.exceptions import DrivingSchoolError, ErrorKind, error_response
from driving_school.core.logging_config import logger
from driving_school.core.rate_limiter import rate_limit_exceeded_handler

# "UNIQUE constraint failed: candidates.email" (SQLite)
_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: \w+\.(\w+)")
# "Key (email)=(a@b.c) already exists." (PostgreSQL)
_POSTGRES_UNIQUE = re.compile(r"Key \((\w+)\)=\(.*\) already exists")


def duplicate_field_from_integrity_error(exc: IntegrityError) -> Optional[str]:
    """Name of the unique column an IntegrityError complains about, if any"""
    text = str(exc.orig) if exc.orig is not None else str(exc)
    for pattern in (_SQLITE_UNIQUE, _POSTGRES_UNIQUE):
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    text = (str(exc.orig) if exc.orig is not None else str(exc)).lower()
    return "foreign key" in text


def _field_name(loc: tuple) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts)


def format_validation_errors(errors: List[Dict[str, Any]]) -> str:
    """Collapse pydantic errors into one readable message"""
    missing = [_field_name(err["loc"]) for err in errors if err.get("type") == "missing"]
    missing = [name for name in missing if name]
    if missing:
        return f"Missing required fields: {', '.join(missing)}"

    messages = []
    for err in errors:
        msg = str(err.get("msg", "Invalid value"))
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        field = _field_name(err.get("loc", ()))
        if err.get("type") == "missing":
            messages.append("Request body is required")
        elif field and err.get("type") != "json_invalid":
            messages.append(f"{field}: {msg}")
        else:
            messages.append(msg)
    return "; ".join(messages) or "Invalid request"


def _envelope(status_code: int, message: str, extra: Optional[Dict[str, Any]] = None) -> JSONResponse:
    content: Dict[str, Any] = {"success": False, "error": message}
    if extra:
        content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


async def application_error_handler(request: Request, exc: DrivingSchoolError) -> JSONResponse:
    if exc.kind == ErrorKind.INTERNAL:
        logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.kind == ErrorKind.AUTHENTICATION else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc, include_details=not settings.is_production),
        headers=headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _envelope(status.HTTP_400_BAD_REQUEST, format_validation_errors(exc.errors()))


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    field = duplicate_field_from_integrity_error(exc)
    if field:
        return _envelope(status.HTTP_400_BAD_REQUEST, f"{field} already exists")
    if is_foreign_key_violation(exc):
        return _envelope(status.HTTP_400_BAD_REQUEST, "Referenced record does not exist")
    logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    return _envelope(status.HTTP_400_BAD_REQUEST, "Database constraint violated")


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = f"Route {request.url.path} not found"
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": message},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    message = str(exc) if not settings.is_production and settings.DEBUG else "Server Error"
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DrivingSchoolError, application_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
