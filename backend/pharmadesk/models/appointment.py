from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..core.db import Base


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        # one queue number per calendar day
        UniqueConstraint("appointment_day", "daily_token", name="uq_appointment_day_token"),
    )

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)

    # Scheduling
    appointment_date = Column(DateTime, nullable=False)
    appointment_time = Column(String(10), nullable=True)  # "HH:MM"
    appointment_day = Column(DateTime, nullable=False, index=True)  # appointment_date at midnight
    daily_token = Column(Integer, nullable=False)

    status = Column(String(40), nullable=False, default="scheduled")

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    patient = relationship("Patient", back_populates="appointments")

    def __repr__(self):
        return (
            f"<Appointment(id={self.id}, patient_id={self.patient_id}, "
            f"day={self.appointment_day}, token={self.daily_token}, status='{self.status}')>"
        )
