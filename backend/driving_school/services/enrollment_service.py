"""Enrollment and course services"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from driving_school.core.logging_config import get_logger
from driving_school.models.candidate import Candidate
from driving_school.models.course import Course, CourseType
from driving_school.models.enrollment import Enrollment, EnrollmentStatus
from driving_school.models.payment import PaymentPlan
from driving_school.schemas.course import CourseCreate, CourseUpdate
from driving_school.schemas.enrollment import EnrollmentCreate, EnrollmentUpdate
from driving_school.utils.db import apply_changes, get_or_404
from driving_school.utils.pagination import Page, PaginationParams, paginate

logger = get_logger(__name__)


class EnrollmentService:
    """Service for enrollments"""

    async def list_enrollments(
        self,
        db: AsyncSession,
        params: PaginationParams,
        candidate_id: Optional[str] = None,
        status: Optional[EnrollmentStatus] = None
    ) -> Page:
        query = select(Enrollment)
        if candidate_id:
            query = query.where(Enrollment.candidate_id == candidate_id)
        if status is not None:
            query = query.where(Enrollment.status == status)

        query = query.order_by(Enrollment.enrollment_date.desc(), Enrollment.created_at.desc())
        return await paginate(db, query, params)

    async def get_enrollment(self, db: AsyncSession, enrollment_id: str) -> Enrollment:
        return await get_or_404(db, Enrollment, enrollment_id, "Enrollment")

    async def create_enrollment(self, db: AsyncSession, data: EnrollmentCreate) -> Enrollment:
        candidate = await get_or_404(db, Candidate, data.candidate_id, "Candidate")
        plan = await get_or_404(db, PaymentPlan, data.payment_plan_id, "Payment plan")

        enrollment = Enrollment(
            candidate_id=candidate.id,
            payment_plan_id=plan.id,
            license_category=data.license_category,
            status=EnrollmentStatus.ACTIVE,
        )
        if data.enrollment_date is not None:
            enrollment.enrollment_date = data.enrollment_date
        db.add(enrollment)
        await db.commit()

        logger.info(f"Enrolled candidate {candidate.id} in {data.license_category.value} under plan {plan.id}")
        return await self.get_enrollment(db, enrollment.id)

    async def update_enrollment(self, db: AsyncSession, enrollment_id: str, data: EnrollmentUpdate) -> Enrollment:
        enrollment = await self.get_enrollment(db, enrollment_id)
        changes = data.changes()
        if "payment_plan_id" in changes:
            await get_or_404(db, PaymentPlan, changes["payment_plan_id"], "Payment plan")

        apply_changes(enrollment, changes)
        await db.commit()
        return await self.get_enrollment(db, enrollment_id)

    async def delete_enrollment(self, db: AsyncSession, enrollment_id: str) -> None:
        enrollment = await self.get_enrollment(db, enrollment_id)
        await db.delete(enrollment)
        await db.commit()
        logger.info(f"Deleted enrollment {enrollment_id}")


class CourseService:
    """Service for the course catalogue"""

    async def list_courses(self, db: AsyncSession, params: PaginationParams, course_type: Optional[CourseType] = None) -> Page:
        query = select(Course)
        if course_type is not None:
            query = query.where(Course.type == course_type)
        return await paginate(db, query.order_by(Course.title), params)

    async def get_course(self, db: AsyncSession, course_id: str) -> Course:
        return await get_or_404(db, Course, course_id, "Course")

    async def create_course(self, db: AsyncSession, data: CourseCreate) -> Course:
        course = Course(**data.model_dump())
        db.add(course)
        await db.commit()
        await db.refresh(course)
        return course

    async def update_course(self, db: AsyncSession, course_id: str, data: CourseUpdate) -> Course:
        course = await self.get_course(db, course_id)
        apply_changes(course, data.changes())
        await db.commit()
        await db.refresh(course)
        return course

    async def delete_course(self, db: AsyncSession, course_id: str) -> None:
        course = await self.get_course(db, course_id)
        await db.delete(course)
        await db.commit()


enrollment_service = EnrollmentService()
course_service = CourseService()
