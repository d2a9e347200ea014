"""
Session Service - the lesson schedule

Handles:
- Booking lessons with double-booking checks for instructor and candidate
- The per-phase session cap
- Completing lessons, which feeds the candidate's phase counters
"""

from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from driving_school.core.exceptions import BusinessRuleError
from driving_school.core.logging_config import get_logger
from driving_school.models.candidate import Candidate, CandidateStatus, Phase, SESSIONS_PER_PHASE
from driving_school.models.instructor import Instructor, InstructorStatus
from driving_school.models.session import Session, SessionStatus
from driving_school.models.vehicle import Vehicle
from driving_school.schemas.session import SessionCreate, SessionUpdate
from driving_school.services.candidate_service import candidate_service
from driving_school.utils.db import apply_changes, get_or_404
from driving_school.utils.pagination import Page, PaginationParams, paginate

logger = get_logger(__name__)


class SessionService:
    """Service for the lesson schedule"""

    # ==================== QUERIES ====================

    async def list_sessions(
        self,
        db: AsyncSession,
        params: PaginationParams,
        status: Optional[SessionStatus] = None,
        lesson_type: Optional[Phase] = None,
        candidate_id: Optional[str] = None,
        instructor_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> Page:
        query = select(Session)

        if status is not None:
            query = query.where(Session.status == status)
        if lesson_type is not None:
            query = query.where(Session.lesson_type == lesson_type)
        if candidate_id:
            query = query.where(Session.candidate_id == candidate_id)
        if instructor_id:
            query = query.where(Session.instructor_id == instructor_id)
        if start_date is not None:
            query = query.where(Session.date >= start_date)
        if end_date is not None:
            query = query.where(Session.date <= end_date)

        query = query.order_by(Session.date, Session.time)
        return await paginate(db, query, params)

    async def upcoming_sessions(self, db: AsyncSession, limit: int) -> List[Session]:
        """Scheduled lessons from today on, soonest first"""
        result = await db.execute(
            select(Session)
            .where(Session.date >= date.today(), Session.status == SessionStatus.SCHEDULED)
            .order_by(Session.date, Session.time)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def candidate_sessions(self, db: AsyncSession, candidate_id: str) -> List[Session]:
        """Full lesson history of a candidate, most recent first"""
        await get_or_404(db, Candidate, candidate_id, "Candidate")
        result = await db.execute(
            select(Session)
            .where(Session.candidate_id == candidate_id)
            .order_by(Session.date.desc(), Session.time.desc())
        )
        return list(result.scalars().all())

    async def instructor_sessions(
        self,
        db: AsyncSession,
        instructor_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[Session]:
        await get_or_404(db, Instructor, instructor_id, "Instructor")

        query = select(Session).where(Session.instructor_id == instructor_id)
        if start_date is not None:
            query = query.where(Session.date >= start_date)
        if end_date is not None:
            query = query.where(Session.date <= end_date)

        result = await db.execute(query.order_by(Session.date, Session.time))
        return list(result.scalars().all())

    async def get_session(self, db: AsyncSession, session_id: str) -> Session:
        return await get_or_404(db, Session, session_id, "Session")

    # ==================== BOOKING ====================

    async def create_session(self, db: AsyncSession, data: SessionCreate) -> Session:
        """
        Book a lesson.

        Both parties must be active, neither may already have a scheduled
        lesson in the same slot, and the candidate may hold at most
        SESSIONS_PER_PHASE scheduled or completed lessons per phase.
        """
        candidate, instructor = await self._active_parties(db, data.candidate_id, data.instructor_id)

        if data.vehicle_id:
            await get_or_404(db, Vehicle, data.vehicle_id, "Vehicle")

        if await self._slot_taken(db, Session.instructor_id, instructor.id, data.date, data.time):
            raise BusinessRuleError("Instructor already has a lesson scheduled at this time")
        if await self._slot_taken(db, Session.candidate_id, candidate.id, data.date, data.time):
            raise BusinessRuleError("Candidate already has a lesson scheduled at this time")

        await self._check_phase_cap(db, candidate.id, data.lesson_type)

        session = Session(
            candidate_id=candidate.id,
            instructor_id=instructor.id,
            vehicle_id=data.vehicle_id or instructor.assigned_vehicle_id,
            lesson_type=data.lesson_type,
            date=data.date,
            time=data.time,
            status=SessionStatus.SCHEDULED,
        )
        db.add(session)
        await db.commit()

        logger.info(
            f"Scheduled {session.lesson_type.value} lesson {session.id} "
            f"on {session.date} {session.time}"
        )
        return await self.get_session(db, session.id)

    async def update_session(self, db: AsyncSession, session_id: str, data: SessionUpdate) -> Session:
        """
        Edit a lesson under the same rules as booking it.

        Completed lessons are frozen (their counters are already recorded),
        and completion itself only goes through complete_session.
        """
        session = await self.get_session(db, session_id)
        changes = data.changes()
        if not changes:
            return session

        if session.status == SessionStatus.COMPLETED:
            raise BusinessRuleError("Completed lessons cannot be modified")

        candidate_id = changes.get("candidate_id", session.candidate_id)
        instructor_id = changes.get("instructor_id", session.instructor_id)
        lesson_type = changes.get("lesson_type", session.lesson_type)
        status = changes.get("status", session.status)
        # A cancelled lesson brought back has to be bookable again
        reactivated = session.status == SessionStatus.CANCELLED and status == SessionStatus.SCHEDULED

        if reactivated or {"candidate_id", "instructor_id"} & changes.keys():
            await self._active_parties(db, candidate_id, instructor_id)
        if changes.get("vehicle_id"):
            await get_or_404(db, Vehicle, changes["vehicle_id"], "Vehicle")

        if status == SessionStatus.SCHEDULED:
            slot_fields = {"date", "time", "instructor_id", "candidate_id"}
            if reactivated or slot_fields & changes.keys():
                slot_date = changes.get("date", session.date)
                slot_time = changes.get("time", session.time)

                if await self._slot_taken(db, Session.instructor_id, instructor_id, slot_date, slot_time, session.id):
                    raise BusinessRuleError("Instructor schedule conflict detected")
                if await self._slot_taken(db, Session.candidate_id, candidate_id, slot_date, slot_time, session.id):
                    raise BusinessRuleError("Candidate schedule conflict detected")

            if reactivated or {"lesson_type", "candidate_id"} & changes.keys():
                await self._check_phase_cap(db, candidate_id, lesson_type, exclude_id=session.id)

        apply_changes(session, changes)
        await db.commit()
        return await self.get_session(db, session_id)

    async def cancel_session(self, db: AsyncSession, session_id: str) -> None:
        session = await self.get_session(db, session_id)
        session.status = SessionStatus.CANCELLED
        await db.commit()
        logger.info(f"Cancelled lesson {session_id}")

    async def complete_session(self, db: AsyncSession, session_id: str) -> Session:
        """Mark a scheduled lesson as done and count it for the candidate's phase"""
        session = await self.get_session(db, session_id)
        if session.status != SessionStatus.SCHEDULED:
            raise BusinessRuleError("Only scheduled lessons can be marked as completed")

        session.status = SessionStatus.COMPLETED
        candidate = await db.get(Candidate, session.candidate_id)
        if candidate is not None:
            candidate_service.record_completed_session(candidate, session.lesson_type)

        await db.commit()
        logger.info(f"Completed lesson {session_id}")
        return await self.get_session(db, session_id)

    async def _active_parties(
        self, db: AsyncSession, candidate_id: str, instructor_id: str
    ) -> Tuple[Candidate, Instructor]:
        candidate = await get_or_404(db, Candidate, candidate_id, "Candidate")
        if candidate.status == CandidateStatus.DELETED:
            raise BusinessRuleError("Cannot schedule for deleted candidate")

        instructor = await get_or_404(db, Instructor, instructor_id, "Instructor")
        if instructor.status == InstructorStatus.DELETED:
            raise BusinessRuleError("Cannot schedule with deleted instructor")

        return candidate, instructor

    async def _check_phase_cap(
        self,
        db: AsyncSession,
        candidate_id: str,
        lesson_type: Phase,
        exclude_id: Optional[str] = None
    ) -> None:
        query = select(func.count()).select_from(Session).where(
            Session.candidate_id == candidate_id,
            Session.lesson_type == lesson_type,
            Session.status != SessionStatus.CANCELLED,
        )
        if exclude_id:
            query = query.where(Session.id != exclude_id)

        booked = await db.execute(query)
        if (booked.scalar() or 0) >= SESSIONS_PER_PHASE:
            raise BusinessRuleError(
                f"Candidate has already reached the maximum of {SESSIONS_PER_PHASE} sessions "
                f"for {lesson_type.value}. Cannot schedule more sessions for this phase."
            )

    async def _slot_taken(
        self,
        db: AsyncSession,
        column,
        owner_id: str,
        slot_date: date,
        slot_time: str,
        exclude_id: Optional[str] = None
    ) -> bool:
        query = select(func.count()).select_from(Session).where(
            column == owner_id,
            Session.date == slot_date,
            Session.time == slot_time,
            Session.status == SessionStatus.SCHEDULED,
        )
        if exclude_id:
            query = query.where(Session.id != exclude_id)
        result = await db.execute(query)
        return bool(result.scalar())


session_service = SessionService()
