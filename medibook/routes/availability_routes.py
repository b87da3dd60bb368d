from datetime import date, datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from medibook.database import get_db
from medibook.errors import BookingError, database_unavailable, to_http_exception
from medibook.scheduling import directory
from medibook.scheduling.timeslots import format_slot_time, parse_slot_time

router = APIRouter(tags=['availability'])

MAX_OVERRIDE_NOTES_LENGTH = 300


class SetAvailabilityRequest(BaseModel):
    doctor_id: str
    date: date
    is_available: bool
    notes: str | None = None
    time_slots: list[str] = []

    @field_validator('doctor_id')
    @classmethod
    def validate_doctor_id(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Doctor ID is required.')
        return normalized

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if len(normalized) > MAX_OVERRIDE_NOTES_LENGTH:
            raise ValueError(f'Notes must be {MAX_OVERRIDE_NOTES_LENGTH} characters or fewer.')

        return normalized

    @field_validator('time_slots')
    @classmethod
    def validate_time_slots(cls, value: list[str]) -> list[str]:
        try:
            return [format_slot_time(parse_slot_time(slot)) for slot in value]
        except BookingError as exc:
            raise ValueError(exc.message) from exc


class AvailabilityOverrideResponse(BaseModel):
    id: int
    doctor_id: str
    date: date
    is_available: bool
    notes: str | None = None
    time_slots: list[str] = []
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


@router.get('/{doctor_id}', response_model=list[AvailabilityOverrideResponse])
def list_doctor_availability(doctor_id: str, db: Session = Depends(get_db)):
    try:
        return directory.list_availability_overrides(doctor_id, db)
    except BookingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/{doctor_id}/{override_date}', response_model=AvailabilityOverrideResponse | None)
def get_doctor_availability(doctor_id: str, override_date: date, db: Session = Depends(get_db)):
    """Return the override for one date, or ``null`` when the normal schedule applies."""
    try:
        directory.get_doctor(doctor_id, db)
        return directory.get_availability_override(doctor_id, override_date, db)
    except BookingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('', response_model=AvailabilityOverrideResponse)
def set_doctor_availability(data: SetAvailabilityRequest, db: Session = Depends(get_db)):
    try:
        return directory.set_availability_override(
            data.doctor_id,
            data.date,
            data.is_available,
            db,
            notes=data.notes or '',
            time_slots=data.time_slots,
        )
    except BookingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc
