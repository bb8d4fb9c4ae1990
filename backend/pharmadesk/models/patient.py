from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..core.db import Base


class Patient(Base):
    __tablename__ = "patients"

    # --- Primary identifiers ---
    id = Column(Integer, primary_key=True, index=True)
    patient_uid = Column(String(50), unique=True, nullable=True, index=True)

    # --- Basic details ---
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=True)
    phone = Column(String(15), nullable=True)
    email = Column(String(100), nullable=True)
    gender = Column(String(10), nullable=True)
    dob = Column(String(20), nullable=True)

    # --- Relationships ---
    appointments = relationship("Appointment", back_populates="patient")
    medical_records = relationship("MedicalRecord", back_populates="patient")

    # --- Timestamps ---
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p).strip()

    def __repr__(self):
        return (
            f"<Patient(id={self.id}, name='{self.full_name}', phone='{self.phone}', "
            f"uid='{self.patient_uid}')>"
        )
