"""Appointment model definitions."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text, Time
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from backend.database import Base
from backend.models.doctor import Doctor
from backend.models.patient import Patient


class Appointment(Base):
    """A patient booked into one provider's column for a stretch of a day."""
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False)
    provider_id = Column(Integer, ForeignKey("doctors.id"), nullable=False)
    appointment_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    reason = Column(Text, default='')
    status = Column(String(20), default='booked', nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    patient = relationship(Patient)
    provider = relationship(Doctor)
