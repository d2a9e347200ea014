from sqlalchemy import Column, String, DateTime, Date, JSON, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from driving_school.core.database import Base
from driving_school.core.types import GUID, generate_uuid


class InstructorStatus(str, enum.Enum):
    ACTIVE = "active"
    DELETED = "deleted"


class Instructor(Base):
    """Driving instructor"""
    __tablename__ = "instructors"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(15), unique=True, index=True, nullable=False)
    address = Column(String(200), nullable=True)
    specialization = Column(String(100), nullable=True)
    hire_date = Column(Date, nullable=True)

    # Vehicles and instructors point at each other; the vehicle side is
    # created by ALTER so the two tables can be built in any order.
    assigned_vehicle_id = Column(
        GUID,
        ForeignKey("vehicles.id", ondelete="SET NULL", use_alter=True, name="fk_instructor_assigned_vehicle"),
        nullable=True,
    )
    status = Column(SQLEnum(InstructorStatus), default=InstructorStatus.ACTIVE, nullable=False, index=True)

    # [{"date": "YYYY-MM-DD", "start_time": "HH:MM", "end_time": "HH:MM"}]
    availability = Column(JSON, nullable=False, default=list)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Read-only view; services write assigned_vehicle_id directly
    assigned_vehicle = relationship("Vehicle", foreign_keys=[assigned_vehicle_id], viewonly=True, lazy="selectin")

    def __repr__(self):
        return f"<Instructor {self.email}>"
