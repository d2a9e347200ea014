from sqlalchemy import Column, String, DateTime, Date, Float, Integer, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime, date
import enum

from driving_school.core.database import Base
from driving_school.core.types import GUID, generate_uuid


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"
    CHECK = "check"


class PaymentPlan(Base):
    """Instalment plan a candidate can enroll under"""
    __tablename__ = "payment_plans"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    number_of_installments = Column(Integer, default=1, nullable=False)
    total_amount = Column(Float, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def installment_amount(self) -> float:
        return round(self.total_amount / max(self.number_of_installments, 1), 2)

    def __repr__(self):
        return f"<PaymentPlan {self.name}>"


class Payment(Base):
    """Payment (or expected instalment) from a candidate"""
    __tablename__ = "payments"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    candidate_id = Column(GUID, ForeignKey("candidates.id"), nullable=False, index=True)
    payment_plan_id = Column(GUID, ForeignKey("payment_plans.id", ondelete="SET NULL"), nullable=True)
    installment_number = Column(Integer, nullable=True)

    amount = Column(Float, nullable=False)
    method = Column(SQLEnum(PaymentMethod), default=PaymentMethod.CASH, nullable=False)
    status = Column(SQLEnum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False, index=True)
    date = Column(Date, default=date.today, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    candidate = relationship("Candidate", lazy="selectin")

    def __repr__(self):
        return f"<Payment {self.amount} {self.status}>"
