"""
Exam Service - exam scheduling and results

Rules for booking an exam of a given type:
- a candidate who failed that type must wait EXAM_RETRY_WAIT_DAYS after the
  failed sitting
- at most one scheduled exam of the type at a time
- a type that has been passed cannot be booked again
- the examiner cannot sit two exams in the same slot
"""

from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from driving_school.core.exceptions import BusinessRuleError
from driving_school.core.logging_config import get_logger
from driving_school.models.candidate import Candidate, CandidateStatus, Phase, PHASE_ORDER
from driving_school.models.course import Course
from driving_school.models.exam import Exam, ExamResult, ExamResultStatus, ExamStatus
from driving_school.models.instructor import Instructor, InstructorStatus
from driving_school.schemas.exam import ExamCreate, ExamEligibility, ExamResultRequest, ExamUpdate
from driving_school.services.candidate_service import candidate_service
from driving_school.utils.db import apply_changes, get_or_404
from driving_school.utils.pagination import Page, PaginationParams, paginate

logger = get_logger(__name__)

EXAM_RETRY_WAIT_DAYS = 15
FINISHED_STATUSES = (ExamStatus.PASSED, ExamStatus.FAILED)


class ExamService:
    """Service for exams"""

    # ==================== QUERIES ====================

    async def list_exams(
        self,
        db: AsyncSession,
        params: PaginationParams,
        status: Optional[ExamStatus] = None,
        exam_type: Optional[Phase] = None,
        candidate_id: Optional[str] = None,
        instructor_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> Page:
        query = select(Exam)

        if status is not None:
            query = query.where(Exam.status == status)
        if exam_type is not None:
            query = query.where(Exam.exam_type == exam_type)
        if candidate_id:
            query = query.where(Exam.candidate_id == candidate_id)
        if instructor_id:
            query = query.where(Exam.instructor_id == instructor_id)
        if start_date is not None:
            query = query.where(Exam.date >= start_date)
        if end_date is not None:
            query = query.where(Exam.date <= end_date)

        query = query.order_by(Exam.date.desc(), Exam.time.desc())
        return await paginate(db, query, params)

    async def upcoming_exams(self, db: AsyncSession, limit: int) -> List[Exam]:
        result = await db.execute(
            select(Exam)
            .where(Exam.date >= date.today(), Exam.status == ExamStatus.SCHEDULED)
            .order_by(Exam.date, Exam.time)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def candidate_history(self, db: AsyncSession, candidate_id: str) -> Tuple[List[Exam], Dict[str, dict]]:
        """
        All exams of a candidate (most recent first) and a per-type summary:
        ``{type: {"attempts": n, "passed": bool, "exams": [...]}}``
        where attempts counts sittings that produced a result.
        """
        await get_or_404(db, Candidate, candidate_id, "Candidate")

        result = await db.execute(
            select(Exam)
            .where(Exam.candidate_id == candidate_id)
            .order_by(Exam.date.desc(), Exam.time.desc())
        )
        exams = list(result.scalars().all())

        history = {}
        for phase in PHASE_ORDER:
            of_type = [exam for exam in exams if exam.exam_type == phase]
            history[phase.value] = {
                "attempts": sum(1 for exam in of_type if exam.status in FINISHED_STATUSES),
                "passed": any(exam.status == ExamStatus.PASSED for exam in of_type),
                "exams": of_type,
            }
        return exams, history

    async def get_exam(self, db: AsyncSession, exam_id: str) -> Exam:
        return await get_or_404(db, Exam, exam_id, "Exam")

    async def check_eligibility(
        self,
        db: AsyncSession,
        candidate_id: str,
        exam_type: Phase,
        on_date: Optional[date] = None,
        exclude_id: Optional[str] = None
    ) -> ExamEligibility:
        """
        Whether the candidate may sit an exam of this type on ``on_date``
        (today by default). Only the retry wait applies here.
        """
        await get_or_404(db, Candidate, candidate_id, "Candidate")
        on_date = on_date or date.today()

        query = select(Exam).where(
            Exam.candidate_id == candidate_id,
            Exam.exam_type == exam_type,
            Exam.status.in_(FINISHED_STATUSES),
        )
        if exclude_id:
            query = query.where(Exam.id != exclude_id)

        result = await db.execute(
            query.order_by(Exam.date.desc(), Exam.updated_at.desc()).limit(1)
        )
        last_exam = result.scalars().first()

        if last_exam is not None and last_exam.status == ExamStatus.FAILED:
            earliest = last_exam.date + timedelta(days=EXAM_RETRY_WAIT_DAYS)
            if on_date < earliest:
                return ExamEligibility(
                    can_take=False,
                    reason=(
                        f"Must wait {EXAM_RETRY_WAIT_DAYS} days between exam attempts. "
                        f"Earliest available date: {earliest.isoformat()}"
                    ),
                    next_available_date=earliest,
                )

        return ExamEligibility(can_take=True)

    # ==================== MUTATIONS ====================

    async def create_exam(self, db: AsyncSession, data: ExamCreate) -> Exam:
        candidate = await get_or_404(db, Candidate, data.candidate_id, "Candidate")
        if candidate.status == CandidateStatus.DELETED:
            raise BusinessRuleError("Cannot schedule exam for deleted candidate")

        instructor = await get_or_404(db, Instructor, data.instructor_id, "Instructor")
        if instructor.status == InstructorStatus.DELETED:
            raise BusinessRuleError("Cannot schedule exam with deleted instructor")

        if data.course_id:
            await get_or_404(db, Course, data.course_id, "Course")

        eligibility = await self.check_eligibility(db, candidate.id, data.exam_type, data.date)
        if not eligibility.can_take:
            raise BusinessRuleError(eligibility.reason)

        exam_type = data.exam_type.value
        if await self._count(db, candidate.id, data.exam_type, (ExamStatus.SCHEDULED,)):
            raise BusinessRuleError(f"Candidate already has a scheduled {exam_type} exam")
        if await self._count(db, candidate.id, data.exam_type, (ExamStatus.PASSED,)):
            raise BusinessRuleError(f"Candidate has already passed the {exam_type} exam")

        if await self._examiner_busy(db, instructor.id, data.date, data.time):
            raise BusinessRuleError("Instructor already has an exam scheduled at this time")

        attempts = await self._count(db, candidate.id, data.exam_type, FINISHED_STATUSES)

        exam = Exam(
            candidate_id=candidate.id,
            instructor_id=instructor.id,
            course_id=data.course_id,
            exam_type=data.exam_type,
            date=data.date,
            time=data.time,
            notes=data.notes,
            status=ExamStatus.SCHEDULED,
            attempt_number=attempts + 1,
        )
        db.add(exam)
        await db.commit()

        logger.info(f"Scheduled {exam_type} exam {exam.id} (attempt {exam.attempt_number}) for {candidate.id}")
        return await self.get_exam(db, exam.id)

    async def update_exam(self, db: AsyncSession, exam_id: str, data: ExamUpdate) -> Exam:
        exam = await self.get_exam(db, exam_id)
        changes = data.changes()

        if "instructor_id" in changes:
            instructor = await get_or_404(db, Instructor, changes["instructor_id"], "Instructor")
            if instructor.status == InstructorStatus.DELETED:
                raise BusinessRuleError("Cannot schedule exam with deleted instructor")
        if changes.get("course_id"):
            await get_or_404(db, Course, changes["course_id"], "Course")

        if "date" in changes:
            eligibility = await self.check_eligibility(
                db, exam.candidate_id, exam.exam_type, changes["date"], exclude_id=exam.id
            )
            if not eligibility.can_take:
                raise BusinessRuleError(eligibility.reason)

        if {"date", "time", "instructor_id"} & changes.keys():
            busy = await self._examiner_busy(
                db,
                changes.get("instructor_id", exam.instructor_id),
                changes.get("date", exam.date),
                changes.get("time", exam.time),
                exclude_id=exam.id,
            )
            if busy:
                raise BusinessRuleError("Schedule conflict detected")

        apply_changes(exam, changes)
        await db.commit()
        return await self.get_exam(db, exam_id)

    async def cancel_exam(self, db: AsyncSession, exam_id: str) -> None:
        exam = await self.get_exam(db, exam_id)
        if exam.status != ExamStatus.SCHEDULED:
            raise BusinessRuleError("Only scheduled exams can be cancelled")

        exam.status = ExamStatus.CANCELLED
        await db.commit()
        logger.info(f"Cancelled exam {exam_id}")

    async def record_result(self, db: AsyncSession, exam_id: str, data: ExamResultRequest) -> Exam:
        """Close a scheduled exam as passed or failed and update the candidate's phase"""
        exam = await self.get_exam(db, exam_id)
        if exam.status != ExamStatus.SCHEDULED:
            raise BusinessRuleError("Only scheduled exams can have results recorded")

        passed = data.result == ExamStatus.PASSED
        exam.status = data.result
        if data.notes:
            exam.notes = data.notes

        db.add(ExamResult(
            exam_id=exam.id,
            candidate_id=exam.candidate_id,
            score=data.score,
            status=ExamResultStatus.PASS if passed else ExamResultStatus.FAIL,
        ))

        candidate = await db.get(Candidate, exam.candidate_id)
        if candidate is not None:
            candidate_service.record_exam_result(candidate, exam.exam_type, passed)

        await db.commit()
        logger.info(f"Exam {exam_id} marked as {data.result.value}")
        return await self.get_exam(db, exam_id)

    async def _count(self, db: AsyncSession, candidate_id: str, exam_type: Phase, statuses) -> int:
        result = await db.execute(
            select(func.count()).select_from(Exam).where(
                Exam.candidate_id == candidate_id,
                Exam.exam_type == exam_type,
                Exam.status.in_(statuses),
            )
        )
        return result.scalar() or 0

    async def _examiner_busy(
        self,
        db: AsyncSession,
        instructor_id: str,
        exam_date: date,
        exam_time: str,
        exclude_id: Optional[str] = None
    ) -> bool:
        query = select(func.count()).select_from(Exam).where(
            Exam.instructor_id == instructor_id,
            Exam.date == exam_date,
            Exam.time == exam_time,
            Exam.status == ExamStatus.SCHEDULED,
        )
        if exclude_id:
            query = query.where(Exam.id != exclude_id)
        result = await db.execute(query)
        return bool(result.scalar())


exam_service = ExamService()
