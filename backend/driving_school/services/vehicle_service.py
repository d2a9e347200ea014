"""
Vehicle Service - Business logic for the fleet

Handles:
- Vehicle CRUD (hard delete, maintenance history removed with the vehicle)
- Instructor assignment, mirrored on the instructor row
- Maintenance logs
"""

from typing import Optional, Tuple

from sqlalchemy import select, func, or_, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from driving_school.core.exceptions import BusinessRuleError, ResourceNotFoundError
from driving_school.core.logging_config import get_logger
from driving_school.models.instructor import Instructor, InstructorStatus
from driving_school.models.vehicle import MaintenanceLog, Vehicle, VehicleStatus
from driving_school.schemas.vehicle import (
    MaintenanceLogCreate,
    MaintenanceLogUpdate,
    VehicleCreate,
    VehicleUpdate,
)
from driving_school.services.instructor_service import link_instructor_and_vehicle
from driving_school.utils.db import apply_changes, get_or_404
from driving_school.utils.pagination import Page, PaginationParams, paginate

logger = get_logger(__name__)


class VehicleService:
    """Service for managing vehicles and their maintenance history"""

    async def list_vehicles(
        self,
        db: AsyncSession,
        params: PaginationParams,
        status: Optional[VehicleStatus] = None,
        search: Optional[str] = None
    ) -> Page:
        """List vehicles, newest first; search matches plate, brand or model"""
        query = select(Vehicle)

        if status is not None:
            query = query.where(Vehicle.status == status)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(or_(
                Vehicle.license_plate.ilike(pattern),
                Vehicle.brand.ilike(pattern),
                Vehicle.model.ilike(pattern),
            ))

        query = query.order_by(Vehicle.created_at.desc())
        return await paginate(db, query, params)

    async def count_vehicles(self, db: AsyncSession) -> int:
        result = await db.execute(
            select(func.count()).select_from(Vehicle).where(Vehicle.status != VehicleStatus.RETIRED)
        )
        return result.scalar() or 0

    async def get_vehicle(self, db: AsyncSession, vehicle_id: str) -> Vehicle:
        return await get_or_404(db, Vehicle, vehicle_id, "Vehicle")

    async def create_vehicle(self, db: AsyncSession, data: VehicleCreate) -> Vehicle:
        vehicle = Vehicle(**data.model_dump())
        db.add(vehicle)
        await db.commit()

        logger.info(f"Created vehicle {vehicle.id} ({vehicle.license_plate})")
        return await self.get_vehicle(db, vehicle.id)

    async def update_vehicle(self, db: AsyncSession, vehicle_id: str, data: VehicleUpdate) -> Vehicle:
        vehicle = await self.get_vehicle(db, vehicle_id)
        changes = data.changes()
        apply_changes(vehicle, changes)

        if changes.get("status") == VehicleStatus.RETIRED and vehicle.assigned_instructor_id:
            # A retired vehicle cannot stay with an instructor
            await self._release_instructor(db, vehicle)

        await db.commit()
        return await self.get_vehicle(db, vehicle_id)

    async def delete_vehicle(self, db: AsyncSession, vehicle_id: str) -> None:
        vehicle = await self.get_vehicle(db, vehicle_id)

        await self._release_instructor(db, vehicle)
        await db.execute(delete(MaintenanceLog).where(MaintenanceLog.vehicle_id == vehicle.id))
        await db.delete(vehicle)
        await db.commit()

        logger.info(f"Deleted vehicle {vehicle_id}")

    async def assign_instructor(self, db: AsyncSession, vehicle_id: str, instructor_id: Optional[str]) -> Vehicle:
        """
        Assign an instructor to a vehicle, or unassign with instructor_id=None.

        Retired vehicles and deleted instructors are refused, as is an
        instructor who already drives another vehicle.
        """
        vehicle = await self.get_vehicle(db, vehicle_id)
        if vehicle.status == VehicleStatus.RETIRED:
            raise BusinessRuleError("Cannot assign instructor to retired vehicle")

        if not instructor_id:
            await self._release_instructor(db, vehicle)
            await db.commit()
            logger.info(f"Unassigned instructor from vehicle {vehicle_id}")
            return await self.get_vehicle(db, vehicle_id)

        instructor = await get_or_404(db, Instructor, instructor_id, "Instructor")
        if instructor.status == InstructorStatus.DELETED:
            raise BusinessRuleError("Cannot assign deleted instructor")
        if instructor.assigned_vehicle_id and instructor.assigned_vehicle_id != vehicle.id:
            raise BusinessRuleError("Instructor already has a vehicle assigned")

        await link_instructor_and_vehicle(db, instructor, vehicle)
        await db.commit()

        logger.info(f"Assigned instructor {instructor.id} to vehicle {vehicle.id}")
        return await self.get_vehicle(db, vehicle_id)

    async def _release_instructor(self, db: AsyncSession, vehicle: Vehicle) -> None:
        await db.execute(
            update(Instructor)
            .where(Instructor.assigned_vehicle_id == vehicle.id)
            .values(assigned_vehicle_id=None)
        )
        vehicle.assigned_instructor_id = None

    # ==================== MAINTENANCE LOGS ====================

    async def list_maintenance_logs(
        self,
        db: AsyncSession,
        vehicle_id: str,
        params: PaginationParams
    ) -> Tuple[Page, float]:
        """One page of logs (most recent first) and the cost of all of them"""
        vehicle = await self.get_vehicle(db, vehicle_id)

        query = (
            select(MaintenanceLog)
            .where(MaintenanceLog.vehicle_id == vehicle.id)
            .order_by(MaintenanceLog.date.desc(), MaintenanceLog.created_at.desc())
        )
        page = await paginate(db, query, params)

        total_cost = await db.execute(
            select(func.coalesce(func.sum(MaintenanceLog.cost), 0.0)).where(MaintenanceLog.vehicle_id == vehicle.id)
        )
        return page, float(total_cost.scalar() or 0.0)

    async def add_maintenance_log(self, db: AsyncSession, vehicle_id: str, data: MaintenanceLogCreate) -> MaintenanceLog:
        vehicle = await self.get_vehicle(db, vehicle_id)

        log = MaintenanceLog(vehicle_id=vehicle.id, **data.model_dump())
        db.add(log)
        await db.commit()
        await db.refresh(log)

        logger.info(f"Added {log.type.value} maintenance log to vehicle {vehicle.id}")
        return log

    async def update_maintenance_log(
        self,
        db: AsyncSession,
        vehicle_id: str,
        log_id: str,
        data: MaintenanceLogUpdate
    ) -> MaintenanceLog:
        vehicle = await self.get_vehicle(db, vehicle_id)

        log = await db.get(MaintenanceLog, log_id)
        if log is None or log.vehicle_id != vehicle.id:
            raise ResourceNotFoundError("Maintenance log", log_id)

        apply_changes(log, data.changes())
        await db.commit()
        await db.refresh(log)
        return log


vehicle_service = VehicleService()
