from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from driving_school.core.config import settings
from driving_school.core.database import get_db
from driving_school.models.admin import Admin
from driving_school.models.candidate import Phase
from driving_school.models.exam import ExamStatus
from driving_school.modules.auth.dependencies import get_current_admin
from driving_school.schemas.common import DataResponse, ListResponse, MessageResponse
from driving_school.schemas.exam import (
    ExamCreate,
    ExamEligibility,
    ExamHistory,
    ExamResponse,
    ExamResultRequest,
    ExamTypeHistory,
    ExamUpdate,
)
from driving_school.services.exam_service import exam_service
from driving_school.utils.pagination import PaginationParams, pagination_params

router = APIRouter()


@router.get("", response_model=ListResponse[ExamResponse])
async def list_exams(
    status_filter: Optional[ExamStatus] = Query(None, alias="status"),
    exam_type: Optional[Phase] = Query(None),
    candidate_id: Optional[str] = Query(None),
    instructor_id: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    params: PaginationParams = Depends(pagination_params),
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    page = await exam_service.list_exams(
        db,
        params,
        status=status_filter,
        exam_type=exam_type,
        candidate_id=candidate_id,
        instructor_id=instructor_id,
        start_date=start_date,
        end_date=end_date,
    )
    return ListResponse(
        count=len(page.items),
        data=[ExamResponse.model_validate(e) for e in page.items],
        pagination=page.meta(),
    )


@router.get("/upcoming", response_model=ListResponse[ExamResponse])
async def upcoming_exams(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    exams = await exam_service.upcoming_exams(db, limit)
    return ListResponse(count=len(exams), data=[ExamResponse.model_validate(e) for e in exams])


@router.get("/candidate/{candidate_id}", response_model=ExamHistory)
async def candidate_exams(
    candidate_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Exam history grouped by exam type"""
    exams, history = await exam_service.candidate_history(db, candidate_id)
    return ExamHistory(
        count=len(exams),
        data={
            exam_type: ExamTypeHistory(
                attempts=entry["attempts"],
                passed=entry["passed"],
                exams=[ExamResponse.model_validate(e) for e in entry["exams"]],
            )
            for exam_type, entry in history.items()
        },
    )


@router.get("/can-take/{candidate_id}/{exam_type}", response_model=DataResponse[ExamEligibility])
async def can_take_exam(
    candidate_id: str,
    exam_type: Phase,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Whether the retry wait allows the candidate to sit this exam today"""
    eligibility = await exam_service.check_eligibility(db, candidate_id, exam_type)
    return DataResponse(data=eligibility)


@router.get("/{exam_id}", response_model=DataResponse[ExamResponse])
async def get_exam(
    exam_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    exam = await exam_service.get_exam(db, exam_id)
    return DataResponse(data=ExamResponse.model_validate(exam))


@router.post("", response_model=DataResponse[ExamResponse], status_code=status.HTTP_201_CREATED)
async def create_exam(
    body: ExamCreate,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    exam = await exam_service.create_exam(db, body)
    return DataResponse(data=ExamResponse.model_validate(exam), message="Exam scheduled successfully")


@router.put("/{exam_id}", response_model=DataResponse[ExamResponse])
async def update_exam(
    exam_id: str,
    body: ExamUpdate,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    exam = await exam_service.update_exam(db, exam_id, body)
    return DataResponse(data=ExamResponse.model_validate(exam), message="Exam updated successfully")


@router.delete("/{exam_id}", response_model=MessageResponse)
async def cancel_exam(
    exam_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    await exam_service.cancel_exam(db, exam_id)
    return MessageResponse(message="Exam cancelled successfully")


@router.put("/{exam_id}/result", response_model=DataResponse[ExamResponse])
async def record_result(
    exam_id: str,
    body: ExamResultRequest,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    exam = await exam_service.record_result(db, exam_id, body)
    return DataResponse(data=ExamResponse.model_validate(exam), message=f"Exam marked as {body.result.value}")
