from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from ..core.db import Base


class MedicalRecord(Base):
    __tablename__ = "medical_records"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=True, index=True)

    # Clinical details
    visit_date = Column(DateTime, nullable=False, default=datetime.utcnow)
    diagnosis = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    doctor_name = Column(String(100), nullable=True)

    patient = relationship("Patient", back_populates="medical_records")
    appointment = relationship("Appointment")
    medications = relationship(
        "PrescribedMedication",
        back_populates="record",
        cascade="all, delete-orphan",
        order_by="PrescribedMedication.id",
    )

    def __repr__(self):
        return f"<MedicalRecord(id={self.id}, doctor={self.doctor_name}, patient_id={self.patient_id})>"


class PrescribedMedication(Base):
    __tablename__ = "prescribed_medications"

    id = Column(Integer, primary_key=True, index=True)
    record_id = Column(Integer, ForeignKey("medical_records.id"), nullable=False, index=True)

    name = Column(String(120), nullable=False)
    strength = Column(String(60), nullable=True)
    form = Column(String(40), nullable=True)
    dosage = Column(String(60), nullable=True)
    frequency = Column(String(60), nullable=True)
    duration = Column(String(60), nullable=True)

    record = relationship("MedicalRecord", back_populates="medications")
