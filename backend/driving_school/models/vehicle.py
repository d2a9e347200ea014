from sqlalchemy import Column, String, DateTime, Date, Float, Text, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from driving_school.core.database import Base
from driving_school.core.types import GUID, generate_uuid
from driving_school.models.candidate import LicenseType


class VehicleStatus(str, enum.Enum):
    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    RETIRED = "retired"


class MaintenanceType(str, enum.Enum):
    OIL_CHANGE = "oil_change"
    TIRE_REPLACEMENT = "tire_replacement"
    BRAKE_SERVICE = "brake_service"
    INSPECTION = "inspection"
    REPAIR = "repair"
    OTHER = "other"


class Vehicle(Base):
    """Training vehicle"""
    __tablename__ = "vehicles"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    brand = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    license_plate = Column(String(20), unique=True, index=True, nullable=False)
    category = Column(SQLEnum(LicenseType), nullable=True)
    assigned_instructor_id = Column(GUID, ForeignKey("instructors.id", ondelete="SET NULL"), nullable=True)
    status = Column(SQLEnum(VehicleStatus), default=VehicleStatus.ACTIVE, nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Read-only view; services write assigned_instructor_id directly
    assigned_instructor = relationship(
        "Instructor", foreign_keys=[assigned_instructor_id], viewonly=True, lazy="selectin"
    )

    def __repr__(self):
        return f"<Vehicle {self.license_plate}>"


class MaintenanceLog(Base):
    """Maintenance history entry for a vehicle"""
    __tablename__ = "maintenance_logs"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    vehicle_id = Column(GUID, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    type = Column(SQLEnum(MaintenanceType), nullable=False)
    description = Column(Text, nullable=True)
    cost = Column(Float, default=0.0, nullable=False)
    performed_by = Column(String(100), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<MaintenanceLog {self.type} {self.date}>"
