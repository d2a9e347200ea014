"""
Candidate Service - Business logic for candidates (students)

Handles:
- Candidate CRUD with soft delete
- Phase counters (sessions completed per phase, exam outcome)
- Progress through highway code -> parking -> driving
"""

import copy
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified

from driving_school.core.logging_config import get_logger
from driving_school.models.candidate import (
    Candidate,
    CandidateStatus,
    LicenseType,
    Phase,
    PhaseStatus,
    DEFAULT_TOTAL_FEE,
    PHASE_ORDER,
    SESSIONS_PER_PHASE,
    default_documents,
    default_phases,
    next_phase,
)
from driving_school.models.session import Session, SessionStatus
from driving_school.schemas.candidate import CandidateCreate, CandidateUpdate
from driving_school.utils.db import apply_changes, get_or_404
from driving_school.utils.pagination import Page, PaginationParams, paginate

logger = get_logger(__name__)


def _phase_entry(phases: List[Dict[str, Any]], phase: Phase) -> Dict[str, Any]:
    for entry in phases:
        if entry.get("phase") == phase.value:
            return entry
    entry = {
        "phase": phase.value,
        "status": PhaseStatus.NOT_STARTED.value,
        "sessions_completed": 0,
        "sessions_plan": SESSIONS_PER_PHASE,
        "exam_passed": False,
        "exam_attempts": 0,
    }
    phases.append(entry)
    return entry


class CandidateService:
    """Service for managing candidates"""

    # ==================== QUERIES ====================

    async def list_candidates(
        self,
        db: AsyncSession,
        params: PaginationParams,
        license_type: Optional[LicenseType] = None,
        status: Optional[CandidateStatus] = None,
        progress: Optional[Phase] = None,
        search: Optional[str] = None
    ) -> Page:
        """
        List candidates, newest registration first.

        Deleted candidates are hidden unless status=deleted is requested.
        search matches name, email or phone (case-insensitive substring).
        """
        query = select(Candidate)

        if status is not None:
            query = query.where(Candidate.status == status)
        else:
            query = query.where(Candidate.status != CandidateStatus.DELETED)

        if license_type is not None:
            query = query.where(Candidate.license_type == license_type)
        if progress is not None:
            query = query.where(Candidate.progress == progress)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(or_(
                Candidate.name.ilike(pattern),
                Candidate.email.ilike(pattern),
                Candidate.phone.ilike(pattern),
            ))

        query = query.order_by(Candidate.registration_date.desc())
        return await paginate(db, query, params)

    async def count_candidates(self, db: AsyncSession) -> int:
        result = await db.execute(
            select(func.count()).select_from(Candidate).where(Candidate.status != CandidateStatus.DELETED)
        )
        return result.scalar() or 0

    async def get_candidate(self, db: AsyncSession, candidate_id: str) -> Candidate:
        return await get_or_404(db, Candidate, candidate_id, "Candidate")

    async def get_candidate_with_progress(self, db: AsyncSession, candidate_id: str) -> Candidate:
        """
        Load a candidate and re-sync its phase counters from the schedule.

        Completed sessions are the source of truth for sessions_completed
        (capped at the phase plan).
        """
        candidate = await self.get_candidate(db, candidate_id)

        result = await db.execute(
            select(Session.lesson_type, func.count())
            .where(Session.candidate_id == candidate.id, Session.status == SessionStatus.COMPLETED)
            .group_by(Session.lesson_type)
        )
        completed = {Phase(lesson_type): count for lesson_type, count in result.all()}

        phases = copy.deepcopy(candidate.phases) if candidate.phases else default_phases()
        changed = not candidate.phases

        for phase in PHASE_ORDER:
            entry = _phase_entry(phases, phase)
            plan = entry.get("sessions_plan") or SESSIONS_PER_PHASE
            actual = min(completed.get(phase, 0), plan)

            if entry.get("sessions_completed") != actual:
                entry["sessions_completed"] = actual
                changed = True

            if actual >= plan and entry.get("status") != PhaseStatus.COMPLETED.value and not entry.get("exam_passed"):
                # Every planned session done: phase is ready for its exam
                entry["status"] = PhaseStatus.COMPLETED.value
                changed = True
            elif actual > 0 and entry.get("status") == PhaseStatus.NOT_STARTED.value:
                entry["status"] = PhaseStatus.IN_PROGRESS.value
                changed = True

        if changed:
            self._set_phases(candidate, phases)
            await db.commit()
            candidate = await self.get_candidate(db, candidate_id)

        return candidate

    # ==================== MUTATIONS ====================

    async def create_candidate(self, db: AsyncSession, data: CandidateCreate) -> Candidate:
        documents = (
            [doc.model_dump() for doc in data.documents]
            if data.documents is not None
            else default_documents()
        )

        candidate = Candidate(
            name=data.name,
            email=data.email,
            phone=data.phone,
            address=data.address,
            date_of_birth=data.date_of_birth,
            license_type=data.license_type,
            total_fee=data.total_fee if data.total_fee is not None else DEFAULT_TOTAL_FEE,
            paid_amount=0.0,
            status=CandidateStatus.ACTIVE,
            progress=Phase.HIGHWAY_CODE,
            documents=documents,
            phases=default_phases(),
        )
        db.add(candidate)
        await db.commit()

        logger.info(f"Created candidate {candidate.id} ({candidate.email})")
        return await self.get_candidate(db, candidate.id)

    async def update_candidate(self, db: AsyncSession, candidate_id: str, data: CandidateUpdate) -> Candidate:
        candidate = await self.get_candidate(db, candidate_id)
        apply_changes(candidate, data.changes())
        await db.commit()
        return await self.get_candidate(db, candidate_id)

    async def delete_candidate(self, db: AsyncSession, candidate_id: str) -> None:
        """Soft delete: the row stays so payments and history remain intact"""
        candidate = await self.get_candidate(db, candidate_id)
        candidate.status = CandidateStatus.DELETED
        await db.commit()
        logger.info(f"Soft-deleted candidate {candidate_id}")

    async def update_progress(self, db: AsyncSession, candidate_id: str, progress: Phase) -> Candidate:
        candidate = await self.get_candidate(db, candidate_id)
        candidate.progress = progress

        phases = copy.deepcopy(candidate.phases or default_phases())
        entry = _phase_entry(phases, progress)
        if entry.get("status") == PhaseStatus.NOT_STARTED.value:
            entry["status"] = PhaseStatus.IN_PROGRESS.value
        self._set_phases(candidate, phases)

        await db.commit()
        return await self.get_candidate(db, candidate_id)

    # ==================== PHASE COUNTERS ====================
    # Called by the schedule and exam services inside their own transaction;
    # they do not commit.

    def record_completed_session(self, candidate: Candidate, phase: Phase) -> None:
        phases = copy.deepcopy(candidate.phases or default_phases())
        entry = _phase_entry(phases, phase)
        entry["sessions_completed"] = min(
            (entry.get("sessions_completed") or 0) + 1,
            entry.get("sessions_plan") or SESSIONS_PER_PHASE,
        )
        if entry.get("status") == PhaseStatus.NOT_STARTED.value:
            entry["status"] = PhaseStatus.IN_PROGRESS.value
        self._set_phases(candidate, phases)

    def record_exam_result(self, candidate: Candidate, phase: Phase, passed: bool) -> None:
        """Count the attempt; a pass moves the candidate to the next phase or completes training"""
        phases = copy.deepcopy(candidate.phases or default_phases())
        entry = _phase_entry(phases, phase)
        entry["exam_attempts"] = (entry.get("exam_attempts") or 0) + 1

        if passed:
            entry["exam_passed"] = True
            entry["status"] = PhaseStatus.COMPLETED.value
            following = next_phase(phase)
            if following is None:
                candidate.status = CandidateStatus.COMPLETED
            else:
                candidate.progress = following
                next_entry = _phase_entry(phases, following)
                if next_entry.get("status") == PhaseStatus.NOT_STARTED.value:
                    next_entry["status"] = PhaseStatus.IN_PROGRESS.value

        self._set_phases(candidate, phases)

    def _set_phases(self, candidate: Candidate, phases: List[Dict[str, Any]]) -> None:
        candidate.phases = phases
        flag_modified(candidate, "phases")


candidate_service = CandidateService()
