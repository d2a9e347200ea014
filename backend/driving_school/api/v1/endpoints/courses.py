from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from driving_school.core.database import get_db
from driving_school.models.admin import Admin
from driving_school.models.course import CourseType
from driving_school.modules.auth.dependencies import get_current_admin
from driving_school.schemas.common import DataResponse, ListResponse, MessageResponse
from driving_school.schemas.course import CourseCreate, CourseResponse, CourseUpdate
from driving_school.services.enrollment_service import course_service
from driving_school.utils.pagination import PaginationParams, pagination_params

router = APIRouter()


@router.get("", response_model=ListResponse[CourseResponse])
async def list_courses(
    course_type: Optional[CourseType] = Query(None, alias="type"),
    params: PaginationParams = Depends(pagination_params),
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    page = await course_service.list_courses(db, params, course_type=course_type)
    return ListResponse(
        count=len(page.items),
        data=[CourseResponse.model_validate(c) for c in page.items],
        pagination=page.meta(),
    )


@router.get("/{course_id}", response_model=DataResponse[CourseResponse])
async def get_course(
    course_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    course = await course_service.get_course(db, course_id)
    return DataResponse(data=CourseResponse.model_validate(course))


@router.post("", response_model=DataResponse[CourseResponse], status_code=status.HTTP_201_CREATED)
async def create_course(
    body: CourseCreate,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    course = await course_service.create_course(db, body)
    return DataResponse(data=CourseResponse.model_validate(course), message="Course created successfully")


@router.put("/{course_id}", response_model=DataResponse[CourseResponse])
async def update_course(
    course_id: str,
    body: CourseUpdate,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    course = await course_service.update_course(db, course_id, body)
    return DataResponse(data=CourseResponse.model_validate(course), message="Course updated successfully")


@router.delete("/{course_id}", response_model=MessageResponse)
async def delete_course(
    course_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    await course_service.delete_course(db, course_id)
    return MessageResponse(message="Course deleted successfully")
