"""Availability override model definitions."""

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, JSON, String, UniqueConstraint
from medibook.database import Base


class AvailabilityOverride(Base):
    """Doctor-set availability for a single date."""
    __tablename__ = "availability_overrides"

    id = Column(Integer, primary_key=True)
    doctor_id = Column(String, ForeignKey("doctors.id"), nullable=False)
    date = Column(Date, nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)
    notes = Column(String, default="")
    time_slots = Column(JSON, default=list)
    updated_at = Column(DateTime)

    __table_args__ = (
        UniqueConstraint("doctor_id", "date", name="uq_availability_doctor_date"),
    )
