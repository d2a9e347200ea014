from sqlalchemy import Column, String, DateTime, Float, Text, Enum as SQLEnum
from datetime import datetime
import enum

from driving_school.core.database import Base
from driving_school.core.types import GUID, generate_uuid


class CourseType(str, enum.Enum):
    THEORY = "theory"
    PRACTICAL = "practical"


class Course(Base):
    """Course offered by the school"""
    __tablename__ = "courses"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    type = Column(SQLEnum(CourseType), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    duration = Column(Float, nullable=False)  # hours
    price = Column(Float, default=0.0, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Course {self.title}>"
