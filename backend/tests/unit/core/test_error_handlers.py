"""
Unit Tests for the error envelope helpers
"""
import json

import pytest
from sqlalchemy.exc import IntegrityError
from starlette.requests import Request

from driving_school.core.config import settings
from driving_school.core.error_handlers import (
    application_error_handler,
    duplicate_field_from_integrity_error,
    format_validation_errors,
    is_foreign_key_violation,
    unhandled_exception_handler,
)
from driving_school.core.exceptions import (
    AuthenticationError,
    BusinessRuleError,
    DrivingSchoolError,
    DuplicateFieldError,
    ErrorKind,
    ResourceNotFoundError,
    ValidationError,
    error_response,
)


def integrity_error(message: str) -> IntegrityError:
    return IntegrityError("INSERT ...", {}, Exception(message))


def make_request(path: str = "/api/v1/candidates") -> Request:
    return Request({"type": "http", "method": "GET", "path": path, "headers": [], "query_string": b""})


class TestFormatValidationErrors:

    def test_missing_fields_are_listed(self):
        errors = [
            {"type": "missing", "loc": ("body", "email"), "msg": "Field required"},
            {"type": "missing", "loc": ("body", "password"), "msg": "Field required"},
        ]

        assert format_validation_errors(errors) == "Missing required fields: email, password"

    def test_value_error_prefix_is_stripped(self):
        errors = [{
            "type": "value_error",
            "loc": ("body", "time"),
            "msg": "Value error, time must be in HH:MM format (00:00-23:59)",
        }]

        assert format_validation_errors(errors) == "time: time must be in HH:MM format (00:00-23:59)"

    def test_several_errors_are_joined(self):
        errors = [
            {"type": "enum", "loc": ("body", "license_type"), "msg": "Input should be 'A1' or 'B'"},
            {"type": "greater_than_equal", "loc": ("query", "page"), "msg": "Input should be >= 1"},
        ]

        message = format_validation_errors(errors)

        assert message == "license_type: Input should be 'A1' or 'B'; page: Input should be >= 1"

    def test_model_level_error_has_no_field(self):
        errors = [{"type": "value_error", "loc": ("body",), "msg": "Value error, Fields cannot be null: email"}]

        assert format_validation_errors(errors) == "Fields cannot be null: email"

    def test_empty_list(self):
        assert format_validation_errors([]) == "Invalid request"


class TestIntegrityErrors:

    def test_sqlite_unique_violation(self):
        error = integrity_error("UNIQUE constraint failed: candidates.email")

        assert duplicate_field_from_integrity_error(error) == "email"

    def test_postgres_unique_violation(self):
        error = integrity_error(
            'duplicate key value violates unique constraint "vehicles_license_plate_key"\n'
            "DETAIL:  Key (license_plate)=(AB-123-CD) already exists."
        )

        assert duplicate_field_from_integrity_error(error) == "license_plate"

    def test_foreign_key_violation(self):
        error = integrity_error("FOREIGN KEY constraint failed")

        assert duplicate_field_from_integrity_error(error) is None
        assert is_foreign_key_violation(error) is True


class TestApplicationErrors:

    @pytest.mark.parametrize("error, status_code", [
        (ValidationError("bad"), 400),
        (BusinessRuleError("not now"), 400),
        (DuplicateFieldError("email"), 400),
        (AuthenticationError(), 401),
        (ResourceNotFoundError("Candidate", "x"), 404),
        (DrivingSchoolError("boom"), 500),
    ])
    def test_status_codes(self, error, status_code):
        assert error.status_code == status_code

    def test_kind_override(self):
        error = DrivingSchoolError("slow down", kind=ErrorKind.RATE_LIMITED)

        assert error.status_code == 429

    def test_not_found_message(self):
        assert ResourceNotFoundError("Payment plan").message == "Payment plan not found"

    def test_envelope_hides_details_by_default(self):
        error = ValidationError("Token is invalid or has expired", field="token")

        assert error_response(error) == {"success": False, "error": "Token is invalid or has expired"}

    def test_envelope_with_details(self):
        error = DuplicateFieldError("phone")

        body = error_response(error, include_details=True)

        assert body["error"] == "phone already exists"
        assert body["details"] == {"field": "phone"}


class TestProductionResponses:

    @pytest.fixture
    def production(self, monkeypatch):
        monkeypatch.setattr(settings, "ENVIRONMENT", "production")
        monkeypatch.setattr(settings, "DEBUG", True)

    @pytest.mark.asyncio
    async def test_unhandled_error_hides_internals(self, production):
        exc = RuntimeError("connection to db-primary:5432 refused")

        response = await unhandled_exception_handler(make_request(), exc)

        assert response.status_code == 500
        assert json.loads(response.body) == {"success": False, "error": "Server Error"}

    @pytest.mark.asyncio
    async def test_application_error_drops_details(self, production):
        error = DrivingSchoolError("Internal server error", details={"query": "SELECT * FROM admins"})

        response = await application_error_handler(make_request(), error)

        assert response.status_code == 500
        assert json.loads(response.body) == {"success": False, "error": "Internal server error"}

    @pytest.mark.asyncio
    async def test_development_shows_the_error(self, monkeypatch):
        monkeypatch.setattr(settings, "ENVIRONMENT", "development")
        monkeypatch.setattr(settings, "DEBUG", True)

        response = await unhandled_exception_handler(make_request(), RuntimeError("boom"))

        assert json.loads(response.body)["error"] == "boom"
