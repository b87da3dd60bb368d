"""Doctor model definitions."""

from sqlalchemy import Boolean, Column, Float, Integer, JSON, String
from medibook.database import Base


class Doctor(Base):
    """Represents a doctor listed in the directory."""
    __tablename__ = "doctors"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    specialization = Column(String, nullable=False, index=True)
    experience = Column(String)
    rating = Column(Float, default=4.5)
    review_count = Column(Integer, default=0)
    consultation_fee = Column(Integer, nullable=False)
    location = Column(String)
    working_days = Column(JSON, default=list)
    working_hours = Column(String)  # display only, slots use the configured window
    languages = Column(JSON, default=list)
    qualifications = Column(JSON, default=list)
    about = Column(String)
    phone_number = Column(String)
    email = Column(String)
    is_available = Column(Boolean, default=True)
