from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from driving_school.core.database import get_db
from driving_school.models.admin import Admin
from driving_school.models.instructor import InstructorStatus
from driving_school.modules.auth.dependencies import get_current_admin
from driving_school.schemas.common import CountData, DataResponse, ListResponse, MessageResponse
from driving_school.schemas.instructor import (
    AssignVehicleRequest,
    InstructorCreate,
    InstructorResponse,
    InstructorUpdate,
)
from driving_school.services.instructor_service import instructor_service
from driving_school.utils.pagination import PaginationParams, pagination_params

router = APIRouter()


@router.get("", response_model=ListResponse[InstructorResponse])
async def list_instructors(
    status_filter: Optional[InstructorStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    params: PaginationParams = Depends(pagination_params),
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    page = await instructor_service.list_instructors(db, params, status=status_filter, search=search)
    return ListResponse(
        count=len(page.items),
        data=[InstructorResponse.model_validate(i) for i in page.items],
        pagination=page.meta(),
    )


@router.get("/count", response_model=DataResponse[CountData])
async def count_instructors(
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    total = await instructor_service.count_instructors(db)
    return DataResponse(data=CountData(total=total))


@router.get("/{instructor_id}", response_model=DataResponse[InstructorResponse])
async def get_instructor(
    instructor_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    instructor = await instructor_service.get_instructor(db, instructor_id)
    return DataResponse(data=InstructorResponse.model_validate(instructor))


@router.post("", response_model=DataResponse[InstructorResponse], status_code=status.HTTP_201_CREATED)
async def create_instructor(
    body: InstructorCreate,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    instructor = await instructor_service.create_instructor(db, body)
    return DataResponse(data=InstructorResponse.model_validate(instructor), message="Instructor created successfully")


@router.put("/{instructor_id}", response_model=DataResponse[InstructorResponse])
async def update_instructor(
    instructor_id: str,
    body: InstructorUpdate,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    instructor = await instructor_service.update_instructor(db, instructor_id, body)
    return DataResponse(data=InstructorResponse.model_validate(instructor), message="Instructor updated successfully")


@router.delete("/{instructor_id}", response_model=MessageResponse)
async def delete_instructor(
    instructor_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Soft delete; refused while the instructor has scheduled lessons"""
    await instructor_service.delete_instructor(db, instructor_id)
    return MessageResponse(message="Instructor deleted successfully")


@router.put("/{instructor_id}/assign-vehicle", response_model=DataResponse[InstructorResponse])
async def assign_vehicle(
    instructor_id: str,
    body: AssignVehicleRequest,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Assign a vehicle, or send vehicle_id null to unassign"""
    instructor = await instructor_service.assign_vehicle(db, instructor_id, body.vehicle_id)
    message = "Vehicle assigned successfully" if body.vehicle_id else "Vehicle unassigned successfully"
    return DataResponse(data=InstructorResponse.model_validate(instructor), message=message)
