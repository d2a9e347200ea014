"""
Unit Tests for candidate training rules
"""
from datetime import date

from driving_school.models.candidate import (
    Candidate,
    Phase,
    PhaseStatus,
    SESSIONS_PER_PHASE,
    calculate_age,
    default_documents,
    default_phases,
    next_phase,
)


class TestPhases:

    def test_next_phase(self):
        assert next_phase(Phase.HIGHWAY_CODE) == Phase.PARKING
        assert next_phase(Phase.PARKING) == Phase.DRIVING
        assert next_phase(Phase.DRIVING) is None

    def test_default_phases(self):
        phases = default_phases()

        assert [p["phase"] for p in phases] == ["highway_code", "parking", "driving"]
        assert phases[0]["status"] == PhaseStatus.IN_PROGRESS.value
        assert all(p["status"] == PhaseStatus.NOT_STARTED.value for p in phases[1:])
        assert all(p["sessions_plan"] == SESSIONS_PER_PHASE for p in phases)
        assert all(p["sessions_completed"] == 0 and p["exam_attempts"] == 0 for p in phases)

    def test_default_phases_are_independent(self):
        first = default_phases()
        first[0]["sessions_completed"] = 5

        assert default_phases()[0]["sessions_completed"] == 0


class TestAge:

    def test_birthday_not_reached(self):
        assert calculate_age(date(2000, 12, 31), today=date(2026, 6, 1)) == 25

    def test_birthday_today(self):
        assert calculate_age(date(2000, 6, 1), today=date(2026, 6, 1)) == 26


class TestDocuments:

    def test_standard_checklist(self):
        documents = default_documents()

        assert len(documents) == 6
        assert all(not doc["checked"] for doc in documents)
        assert documents[-1] == {"name": "Parental authorization (if under 19)", "checked": False}

    def test_checklist_is_a_fresh_copy(self):
        documents = default_documents()
        documents[0]["checked"] = True

        assert not default_documents()[0]["checked"]


class TestCandidate:

    def test_remaining_amount(self):
        candidate = Candidate(total_fee=34000.0, paid_amount=12000.0)

        assert candidate.remaining_amount == 22000.0

    def test_remaining_amount_never_negative(self):
        candidate = Candidate(total_fee=1000.0, paid_amount=1500.0)

        assert candidate.remaining_amount == 0.0

    def test_get_phase(self):
        candidate = Candidate(phases=default_phases())

        assert candidate.get_phase(Phase.PARKING)["phase"] == "parking"
