from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from driving_school.core.config import settings
from driving_school.core.database import get_db
from driving_school.models.admin import Admin
from driving_school.models.candidate import Phase
from driving_school.models.session import SessionStatus
from driving_school.modules.auth.dependencies import get_current_admin
from driving_school.schemas.common import DataResponse, ListResponse, MessageResponse
from driving_school.schemas.session import SessionCreate, SessionResponse, SessionUpdate
from driving_school.services.session_service import session_service
from driving_school.utils.pagination import PaginationParams, pagination_params

router = APIRouter()


def session_list(sessions) -> ListResponse[SessionResponse]:
    return ListResponse(count=len(sessions), data=[SessionResponse.model_validate(s) for s in sessions])


@router.get("", response_model=ListResponse[SessionResponse])
async def list_sessions(
    status_filter: Optional[SessionStatus] = Query(None, alias="status"),
    lesson_type: Optional[Phase] = Query(None),
    candidate_id: Optional[str] = Query(None),
    instructor_id: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    params: PaginationParams = Depends(pagination_params),
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """List lessons in date/time order"""
    page = await session_service.list_sessions(
        db,
        params,
        status=status_filter,
        lesson_type=lesson_type,
        candidate_id=candidate_id,
        instructor_id=instructor_id,
        start_date=start_date,
        end_date=end_date,
    )
    return ListResponse(
        count=len(page.items),
        data=[SessionResponse.model_validate(s) for s in page.items],
        pagination=page.meta(),
    )


@router.get("/upcoming", response_model=ListResponse[SessionResponse])
async def upcoming_sessions(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    sessions = await session_service.upcoming_sessions(db, limit)
    return session_list(sessions)


@router.get("/candidate/{candidate_id}", response_model=ListResponse[SessionResponse])
async def candidate_sessions(
    candidate_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    sessions = await session_service.candidate_sessions(db, candidate_id)
    return session_list(sessions)


@router.get("/instructor/{instructor_id}", response_model=ListResponse[SessionResponse])
async def instructor_sessions(
    instructor_id: str,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    sessions = await session_service.instructor_sessions(db, instructor_id, start_date, end_date)
    return session_list(sessions)


@router.get("/{session_id}", response_model=DataResponse[SessionResponse])
async def get_session(
    session_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    session = await session_service.get_session(db, session_id)
    return DataResponse(data=SessionResponse.model_validate(session))


@router.post("", response_model=DataResponse[SessionResponse], status_code=status.HTTP_201_CREATED)
async def create_session(
    body: SessionCreate,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    session = await session_service.create_session(db, body)
    return DataResponse(data=SessionResponse.model_validate(session), message="Lesson scheduled successfully")


@router.put("/{session_id}", response_model=DataResponse[SessionResponse])
async def update_session(
    session_id: str,
    body: SessionUpdate,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    session = await session_service.update_session(db, session_id, body)
    return DataResponse(data=SessionResponse.model_validate(session), message="Schedule updated successfully")


@router.delete("/{session_id}", response_model=MessageResponse)
async def cancel_session(
    session_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Cancel a lesson; the row is kept with status cancelled"""
    await session_service.cancel_session(db, session_id)
    return MessageResponse(message="Lesson cancelled successfully")


@router.put("/{session_id}/complete", response_model=DataResponse[SessionResponse])
async def complete_session(
    session_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    session = await session_service.complete_session(db, session_id)
    return DataResponse(data=SessionResponse.model_validate(session), message="Lesson marked as completed")
