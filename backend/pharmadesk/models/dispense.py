import json

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..core.db import Base

PAYMENT_PENDING = "pending"
PAYMENT_PARTIAL = "partial"
PAYMENT_PAID = "paid"


class Dispense(Base):
    __tablename__ = "dispenses"

    id = Column(Integer, primary_key=True, index=True)

    # Foreign Keys
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=True, index=True)

    # Set only when created through date + token lookup
    appointment_day = Column(DateTime, nullable=True)
    daily_token = Column(Integer, nullable=True)

    # Dispensed items (list of line-item dicts)
    items_json = Column(Text, nullable=False, default="[]")

    # Money
    subtotal = Column(Float, nullable=False, default=0.0)
    tax = Column(Float, nullable=False, default=0.0)
    total = Column(Float, nullable=False, default=0.0)

    # Payment
    payment_status = Column(String(20), nullable=False, default=PAYMENT_PENDING)  # pending | partial | paid
    paid_amount = Column(Float, nullable=False, default=0.0)
    bill_number = Column(String(40), nullable=True, index=True)

    dispensed_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # ORM relations
    patient = relationship("Patient", lazy="joined")
    appointment = relationship("Appointment", lazy="joined")

    @property
    def items(self):
        """Return list of item dicts from stored JSON."""
        try:
            data = json.loads(self.items_json or "[]")
        except ValueError:
            return []
        return data if isinstance(data, list) else []

    @items.setter
    def items(self, value):
        self.items_json = json.dumps(list(value or []), ensure_ascii=False)

    @property
    def balance_due(self) -> float:
        return round(max(0.0, float(self.total or 0.0) - float(self.paid_amount or 0.0)), 2)

    def __repr__(self):
        return (
            f"<Dispense(id={self.id}, patient_id={self.patient_id}, total={self.total}, "
            f"status='{self.payment_status}', bill='{self.bill_number}')>"
        )
