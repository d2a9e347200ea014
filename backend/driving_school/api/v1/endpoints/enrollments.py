from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from driving_school.core.database import get_db
from driving_school.models.admin import Admin
from driving_school.models.enrollment import EnrollmentStatus
from driving_school.modules.auth.dependencies import get_current_admin
from driving_school.schemas.common import DataResponse, ListResponse, MessageResponse
from driving_school.schemas.enrollment import EnrollmentCreate, EnrollmentResponse, EnrollmentUpdate
from driving_school.services.enrollment_service import enrollment_service
from driving_school.utils.pagination import PaginationParams, pagination_params

router = APIRouter()


@router.get("", response_model=ListResponse[EnrollmentResponse])
async def list_enrollments(
    candidate_id: Optional[str] = Query(None),
    status_filter: Optional[EnrollmentStatus] = Query(None, alias="status"),
    params: PaginationParams = Depends(pagination_params),
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    page = await enrollment_service.list_enrollments(db, params, candidate_id=candidate_id, status=status_filter)
    return ListResponse(
        count=len(page.items),
        data=[EnrollmentResponse.model_validate(e) for e in page.items],
        pagination=page.meta(),
    )


@router.get("/{enrollment_id}", response_model=DataResponse[EnrollmentResponse])
async def get_enrollment(
    enrollment_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    enrollment = await enrollment_service.get_enrollment(db, enrollment_id)
    return DataResponse(data=EnrollmentResponse.model_validate(enrollment))


@router.post("", response_model=DataResponse[EnrollmentResponse], status_code=status.HTTP_201_CREATED)
async def create_enrollment(
    body: EnrollmentCreate,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    enrollment = await enrollment_service.create_enrollment(db, body)
    return DataResponse(data=EnrollmentResponse.model_validate(enrollment), message="Enrollment created successfully")


@router.put("/{enrollment_id}", response_model=DataResponse[EnrollmentResponse])
async def update_enrollment(
    enrollment_id: str,
    body: EnrollmentUpdate,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    enrollment = await enrollment_service.update_enrollment(db, enrollment_id, body)
    return DataResponse(data=EnrollmentResponse.model_validate(enrollment), message="Enrollment updated successfully")


@router.delete("/{enrollment_id}", response_model=MessageResponse)
async def delete_enrollment(
    enrollment_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    await enrollment_service.delete_enrollment(db, enrollment_id)
    return MessageResponse(message="Enrollment deleted successfully")
