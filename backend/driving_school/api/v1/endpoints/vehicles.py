from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from driving_school.core.database import get_db
from driving_school.models.admin import Admin
from driving_school.models.vehicle import VehicleStatus
from driving_school.modules.auth.dependencies import get_current_admin
from driving_school.schemas.common import CountData, DataResponse, ListResponse, MessageResponse
from driving_school.schemas.vehicle import (
    AssignInstructorRequest,
    MaintenanceLogCreate,
    MaintenanceLogList,
    MaintenanceLogResponse,
    MaintenanceLogUpdate,
    VehicleCreate,
    VehicleResponse,
    VehicleUpdate,
)
from driving_school.services.vehicle_service import vehicle_service
from driving_school.utils.pagination import PaginationParams, pagination_params

router = APIRouter()


@router.get("", response_model=ListResponse[VehicleResponse])
async def list_vehicles(
    status_filter: Optional[VehicleStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, description="Matches plate, brand or model"),
    params: PaginationParams = Depends(pagination_params),
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    page = await vehicle_service.list_vehicles(db, params, status=status_filter, search=search)
    return ListResponse(
        count=len(page.items),
        data=[VehicleResponse.model_validate(v) for v in page.items],
        pagination=page.meta(),
    )


@router.get("/count", response_model=DataResponse[CountData])
async def count_vehicles(
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Vehicles that are not retired"""
    total = await vehicle_service.count_vehicles(db)
    return DataResponse(data=CountData(total=total))


@router.get("/{vehicle_id}", response_model=DataResponse[VehicleResponse])
async def get_vehicle(
    vehicle_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    vehicle = await vehicle_service.get_vehicle(db, vehicle_id)
    return DataResponse(data=VehicleResponse.model_validate(vehicle))


@router.post("", response_model=DataResponse[VehicleResponse], status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    body: VehicleCreate,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    vehicle = await vehicle_service.create_vehicle(db, body)
    return DataResponse(data=VehicleResponse.model_validate(vehicle), message="Vehicle created successfully")


@router.put("/{vehicle_id}", response_model=DataResponse[VehicleResponse])
async def update_vehicle(
    vehicle_id: str,
    body: VehicleUpdate,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    vehicle = await vehicle_service.update_vehicle(db, vehicle_id, body)
    return DataResponse(data=VehicleResponse.model_validate(vehicle), message="Vehicle updated successfully")


@router.delete("/{vehicle_id}", response_model=MessageResponse)
async def delete_vehicle(
    vehicle_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    await vehicle_service.delete_vehicle(db, vehicle_id)
    return MessageResponse(message="Vehicle deleted successfully")


@router.put("/{vehicle_id}/assign-instructor", response_model=DataResponse[VehicleResponse])
async def assign_instructor(
    vehicle_id: str,
    body: AssignInstructorRequest,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    vehicle = await vehicle_service.assign_instructor(db, vehicle_id, body.instructor_id)
    message = "Instructor assigned successfully" if body.instructor_id else "Instructor unassigned successfully"
    return DataResponse(data=VehicleResponse.model_validate(vehicle), message=message)


# ==================== MAINTENANCE LOGS ====================

@router.get("/{vehicle_id}/maintenance-logs", response_model=MaintenanceLogList)
async def list_maintenance_logs(
    vehicle_id: str,
    params: PaginationParams = Depends(pagination_params),
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Maintenance history, most recent first, with the total cost of all entries"""
    page, total_cost = await vehicle_service.list_maintenance_logs(db, vehicle_id, params)
    return MaintenanceLogList(
        count=len(page.items),
        total_cost=total_cost,
        data=[MaintenanceLogResponse.model_validate(log) for log in page.items],
        pagination=page.meta(),
    )


@router.post(
    "/{vehicle_id}/maintenance-logs",
    response_model=DataResponse[MaintenanceLogResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_maintenance_log(
    vehicle_id: str,
    body: MaintenanceLogCreate,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    log = await vehicle_service.add_maintenance_log(db, vehicle_id, body)
    return DataResponse(data=MaintenanceLogResponse.model_validate(log), message="Maintenance log added successfully")


@router.put("/{vehicle_id}/maintenance-logs/{log_id}", response_model=DataResponse[MaintenanceLogResponse])
async def update_maintenance_log(
    vehicle_id: str,
    log_id: str,
    body: MaintenanceLogUpdate,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    log = await vehicle_service.update_maintenance_log(db, vehicle_id, log_id, body)
    return DataResponse(data=MaintenanceLogResponse.model_validate(log), message="Maintenance log updated successfully")
