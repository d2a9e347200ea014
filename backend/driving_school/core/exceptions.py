"""
Custom Exceptions for the Driving School API
============================================

Services raise these instead of HTTPException so the same rules can be
reused outside of a request. The handlers in
``driving_school.core.error_handlers`` turn them into the JSON envelope
``{"success": false, "error": "<message>"}`` with the status of their kind.

Usage:
    from driving_school.core.exceptions import ResourceNotFoundError

    candidate = await db.get(Candidate, candidate_id)
    if not candidate:
        raise ResourceNotFoundError("Candidate", candidate_id)
"""

import enum
from typing import Optional, Any, Dict


class ErrorKind(str, enum.Enum):
    """Error categories and the HTTP status each one maps to"""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    RATE_LIMITED = "rate_limited"
    INTERNAL = "internal"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.AUTHORIZATION: 403,
    ErrorKind.NOT_FOUND: 404,
    # Duplicate keys are reported as bad requests by this API
    ErrorKind.CONFLICT: 400,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.INTERNAL: 500,
}


class DrivingSchoolError(Exception):
    """Base exception for all application errors"""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str,
        kind: Optional[ErrorKind] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        if kind is not None:
            self.kind = kind
        self.details = details or {}
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(DrivingSchoolError):
    """Credentials or bearer token rejected"""

    kind = ErrorKind.AUTHENTICATION

    def __init__(self, message: str = "Not authorized to access this route"):
        super().__init__(message)


class InvalidTokenError(AuthenticationError):
    """JWT token is malformed, badly signed or of the wrong type"""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class TokenExpiredError(AuthenticationError):
    """JWT token has expired"""

    def __init__(self, message: str = "Token expired"):
        super().__init__(message)


class AuthorizationError(DrivingSchoolError):
    """Authenticated but not allowed"""

    kind = ErrorKind.AUTHORIZATION

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(DrivingSchoolError):
    """Referenced record does not exist"""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource_type: str, resource_id: Optional[str] = None):
        super().__init__(
            f"{resource_type} not found",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


# ============================================
# Validation & Business Rule Errors (400-type)
# ============================================

class ValidationError(DrivingSchoolError):
    """Input validation failed"""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, details=details)


class ConflictError(DrivingSchoolError):
    """Write would violate a uniqueness rule or clash with existing data"""

    kind = ErrorKind.CONFLICT

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, details=details)


class DuplicateFieldError(ConflictError):
    """Unique column already holds this value"""

    def __init__(self, field: str):
        super().__init__(f"{field} already exists", field=field)


class BusinessRuleError(DrivingSchoolError):
    """Request is well formed but not allowed in the current state"""

    kind = ErrorKind.VALIDATION


def error_response(error: DrivingSchoolError, include_details: bool = False) -> Dict[str, Any]:
    """Build the API error envelope for an application error"""
    body: Dict[str, Any] = {"success": False, "error": error.message}
    if include_details and error.details:
        body["details"] = error.details
    return body
