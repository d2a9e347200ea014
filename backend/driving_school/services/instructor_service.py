"""
Instructor Service - Business logic for instructors

Handles:
- Instructor CRUD with soft delete
- Vehicle assignment (kept consistent on both the instructor and the vehicle)
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import select, func, or_, update
from sqlalchemy.ext.asyncio import AsyncSession

from driving_school.core.exceptions import BusinessRuleError
from driving_school.core.logging_config import get_logger
from driving_school.models.instructor import Instructor, InstructorStatus
from driving_school.models.session import Session, SessionStatus
from driving_school.models.vehicle import Vehicle, VehicleStatus
from driving_school.schemas.instructor import AvailabilityWindow, InstructorCreate, InstructorUpdate
from driving_school.utils.db import apply_changes, get_or_404
from driving_school.utils.pagination import Page, PaginationParams, paginate

logger = get_logger(__name__)


def serialize_availability(windows: Optional[List[AvailabilityWindow]]) -> List[Dict[str, Any]]:
    """JSON-ready availability windows"""
    return [window.model_dump(mode="json") for window in windows or []]


class InstructorService:
    """Service for managing instructors"""

    async def list_instructors(
        self,
        db: AsyncSession,
        params: PaginationParams,
        status: Optional[InstructorStatus] = None,
        search: Optional[str] = None
    ) -> Page:
        query = select(Instructor)

        if status is not None:
            query = query.where(Instructor.status == status)
        else:
            query = query.where(Instructor.status != InstructorStatus.DELETED)

        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(or_(
                Instructor.name.ilike(pattern),
                Instructor.email.ilike(pattern),
                Instructor.phone.ilike(pattern),
            ))

        query = query.order_by(Instructor.created_at.desc())
        return await paginate(db, query, params)

    async def count_instructors(self, db: AsyncSession) -> int:
        result = await db.execute(
            select(func.count()).select_from(Instructor).where(Instructor.status != InstructorStatus.DELETED)
        )
        return result.scalar() or 0

    async def get_instructor(self, db: AsyncSession, instructor_id: str) -> Instructor:
        return await get_or_404(db, Instructor, instructor_id, "Instructor")

    async def create_instructor(self, db: AsyncSession, data: InstructorCreate) -> Instructor:
        instructor = Instructor(
            name=data.name,
            email=data.email,
            phone=data.phone,
            address=data.address,
            specialization=data.specialization,
            hire_date=data.hire_date,
            availability=serialize_availability(data.availability),
            status=InstructorStatus.ACTIVE,
        )
        db.add(instructor)
        await db.commit()

        logger.info(f"Created instructor {instructor.id} ({instructor.email})")
        return await self.get_instructor(db, instructor.id)

    async def update_instructor(self, db: AsyncSession, instructor_id: str, data: InstructorUpdate) -> Instructor:
        instructor = await self.get_instructor(db, instructor_id)

        changes = data.changes()
        if "availability" in changes:
            changes["availability"] = serialize_availability(data.availability)
        apply_changes(instructor, changes)

        await db.commit()
        return await self.get_instructor(db, instructor_id)

    async def delete_instructor(self, db: AsyncSession, instructor_id: str) -> None:
        """
        Soft delete. Refused while the instructor still has scheduled
        sessions; any assigned vehicle is released.
        """
        instructor = await self.get_instructor(db, instructor_id)

        scheduled = await db.execute(
            select(func.count()).select_from(Session).where(
                Session.instructor_id == instructor.id,
                Session.status == SessionStatus.SCHEDULED,
            )
        )
        if scheduled.scalar():
            raise BusinessRuleError("Cannot delete instructor with scheduled lessons")

        await self._release_vehicles(db, instructor)
        instructor.status = InstructorStatus.DELETED
        await db.commit()
        logger.info(f"Soft-deleted instructor {instructor_id}")

    async def assign_vehicle(self, db: AsyncSession, instructor_id: str, vehicle_id: Optional[str]) -> Instructor:
        """
        Assign a vehicle to an instructor, or unassign with vehicle_id=None.

        A retired vehicle, or one that already belongs to another
        instructor, cannot be assigned. Any previous pairing on either side
        is cleared first.
        """
        instructor = await self.get_instructor(db, instructor_id)
        if instructor.status == InstructorStatus.DELETED:
            raise BusinessRuleError("Cannot assign vehicle to deleted instructor")

        if not vehicle_id:
            await self._release_vehicles(db, instructor)
            await db.commit()
            logger.info(f"Unassigned vehicle from instructor {instructor_id}")
            return await self.get_instructor(db, instructor_id)

        vehicle = await get_or_404(db, Vehicle, vehicle_id, "Vehicle")
        if vehicle.status == VehicleStatus.RETIRED:
            raise BusinessRuleError("Cannot assign retired vehicle")
        if vehicle.assigned_instructor_id and vehicle.assigned_instructor_id != instructor.id:
            raise BusinessRuleError("Vehicle is already assigned to another instructor")

        await link_instructor_and_vehicle(db, instructor, vehicle)
        await db.commit()

        logger.info(f"Assigned vehicle {vehicle.id} to instructor {instructor.id}")
        return await self.get_instructor(db, instructor_id)

    async def _release_vehicles(self, db: AsyncSession, instructor: Instructor) -> None:
        await db.execute(
            update(Vehicle)
            .where(Vehicle.assigned_instructor_id == instructor.id)
            .values(assigned_instructor_id=None)
        )
        instructor.assigned_vehicle_id = None


async def link_instructor_and_vehicle(db: AsyncSession, instructor: Instructor, vehicle: Vehicle) -> None:
    """
    Pair one instructor with one vehicle, clearing whatever either side was
    previously paired with. Does not commit.
    """
    await db.execute(
        update(Vehicle)
        .where(Vehicle.assigned_instructor_id == instructor.id, Vehicle.id != vehicle.id)
        .values(assigned_instructor_id=None)
    )
    await db.execute(
        update(Instructor)
        .where(Instructor.assigned_vehicle_id == vehicle.id, Instructor.id != instructor.id)
        .values(assigned_vehicle_id=None)
    )
    instructor.assigned_vehicle_id = vehicle.id
    vehicle.assigned_instructor_id = instructor.id


instructor_service = InstructorService()
