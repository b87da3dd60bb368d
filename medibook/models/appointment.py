"""Appointment model definitions."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, String, text
from medibook.database import Base


class Appointment(Base):
    """Represents a booked appointment. Cancellation is a status change."""
    __tablename__ = "appointments"

    id = Column(String, primary_key=True)
    doctor_id = Column(String, ForeignKey("doctors.id"), nullable=False)
    patient_id = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    slot_minute = Column(Integer, nullable=False)  # minutes since midnight
    time = Column(String, nullable=False)
    appointment_type = Column(String, nullable=False)  # in-person/video
    status = Column(String, nullable=False, default="scheduled")
    consultation_fee = Column(Integer, nullable=False)
    notes = Column(String, default="")
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime)
    cancelled_at = Column(DateTime)
    cancellation_reason = Column(String)
    rescheduled_at = Column(DateTime)

    __table_args__ = (
        Index(
            "uq_appointments_active_slot",
            "doctor_id",
            "date",
            "slot_minute",
            unique=True,
            sqlite_where=text("status != 'cancelled'"),
            postgresql_where=text("status != 'cancelled'"),
        ),
    )
