"""
Unit Tests for request schemas
Tests for: shared field types, partial updates, per-resource rules
"""
import pytest
from datetime import date, timedelta
from pydantic import ValidationError

from driving_school.schemas.auth import LoginRequest
from driving_school.schemas.candidate import CandidateCreate, CandidateUpdate
from driving_school.schemas.exam import ExamResultRequest
from driving_school.schemas.instructor import AvailabilityWindow
from driving_school.schemas.session import SessionCreate
from driving_school.schemas.vehicle import VehicleCreate


def years_ago(years: int) -> date:
    today = date.today()
    try:
        return today.replace(year=today.year - years)
    except ValueError:
        # 29 February
        return today.replace(year=today.year - years, day=28)


def candidate_payload(**overrides) -> dict:
    payload = {
        "name": "Amine Saidi",
        "email": "amine@example.com",
        "phone": "0612345678",
        "license_type": "B",
    }
    payload.update(overrides)
    return payload


class TestSharedFieldTypes:

    @pytest.mark.parametrize("value", ["00:00", "09:30", "23:59"])
    def test_valid_times(self, value):
        session = SessionCreate(
            candidate_id="c", instructor_id="i", date=date.today(), time=value, lesson_type="parking"
        )
        assert session.time == value

    @pytest.mark.parametrize("value", ["24:00", "9:30", "12:60", "12h30", ""])
    def test_invalid_times(self, value):
        with pytest.raises(ValidationError):
            SessionCreate(candidate_id="c", instructor_id="i", date=date.today(), time=value, lesson_type="parking")

    def test_email_is_normalized(self):
        candidate = CandidateCreate(**candidate_payload(email="  Amine@Example.COM "))

        assert candidate.email == "amine@example.com"

    @pytest.mark.parametrize("phone", ["061234567", "06-12-34-56-78", "0612345678901234"])
    def test_invalid_phone(self, phone):
        with pytest.raises(ValidationError):
            CandidateCreate(**candidate_payload(phone=phone))

    def test_strings_are_trimmed(self):
        candidate = CandidateCreate(**candidate_payload(name="  Amine Saidi  "))

        assert candidate.name == "Amine Saidi"


class TestCandidateSchemas:

    def test_minimum_age(self):
        with pytest.raises(ValidationError):
            CandidateCreate(**candidate_payload(date_of_birth=years_ago(15).isoformat()))

    def test_sixteen_is_old_enough(self):
        candidate = CandidateCreate(**candidate_payload(date_of_birth=years_ago(16).isoformat()))

        assert candidate.date_of_birth == years_ago(16)

    def test_update_tracks_only_sent_fields(self):
        update = CandidateUpdate(name="New Name")

        assert update.changes() == {"name": "New Name"}

    def test_update_accepts_single_letter_name(self):
        assert CandidateUpdate(name="X").changes() == {"name": "X"}

    def test_update_allows_clearing_optional_fields(self):
        update = CandidateUpdate(address=None)

        assert update.changes() == {"address": None}

    def test_update_rejects_null_required_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            CandidateUpdate(name=None, phone=None)

        assert "Fields cannot be null: name, phone" in str(exc_info.value)


class TestOtherSchemas:

    def test_availability_window_order(self):
        with pytest.raises(ValidationError):
            AvailabilityWindow(date=date.today(), start_time="14:00", end_time="14:00")

    def test_availability_window(self):
        window = AvailabilityWindow(date=date.today() + timedelta(days=1), start_time="08:00", end_time="12:00")

        assert window.end_time == "12:00"

    def test_license_plate_is_uppercased(self):
        vehicle = VehicleCreate(brand="Dacia", model="Logan", license_plate="ab-123-cd")

        assert vehicle.license_plate == "AB-123-CD"

    def test_exam_result_must_be_final(self):
        with pytest.raises(ValidationError):
            ExamResultRequest(result="cancelled")

    def test_login_username_is_optional(self):
        login = LoginRequest(email="Admin@Test.com", password="password123")

        assert login.email == "admin@test.com"
        assert login.username is None
