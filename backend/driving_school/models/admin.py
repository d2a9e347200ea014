from sqlalchemy import Column, String, DateTime
from datetime import datetime

from driving_school.core.database import Base
from driving_school.core.types import GUID, generate_uuid


class Admin(Base):
    """Back-office administrator (the only authenticated role)"""
    __tablename__ = "admins"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    last_password_change = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Admin {self.email}>"
