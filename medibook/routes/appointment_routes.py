from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from medibook.core import config
from medibook.database import ensure_database_ready, get_db
from medibook.errors import BookingError, database_unavailable, to_http_exception
from medibook.models.appointment import Appointment
from medibook.scheduling import booking
from medibook.scheduling.directory import find_doctor

router = APIRouter(tags=['appointments'])


class CreateAppointmentRequest(BaseModel):
    doctor_id: str
    patient_id: str
    date: date
    time: str
    type: str
    notes: str | None = None

    @field_validator('doctor_id', 'patient_id', 'time')
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Field is required.')
        return normalized

    @field_validator('type')
    @classmethod
    def validate_appointment_type(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in booking.APPOINTMENT_TYPES:
            raise ValueError('Invalid appointment type.')
        return normalized

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > config.MAX_APPOINTMENT_NOTES_LENGTH:
            raise ValueError(f'Notes must be {config.MAX_APPOINTMENT_NOTES_LENGTH} characters or fewer.')

        return normalized


class RescheduleAppointmentRequest(BaseModel):
    new_date: date | None = Field(default=None, alias='date')
    new_time: str | None = Field(default=None, alias='time')


class UpdateAppointmentStatusRequest(BaseModel):
    status: str
    notes: str | None = None

    @field_validator('status')
    @classmethod
    def validate_status(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in booking.APPOINTMENT_STATUSES:
            raise ValueError('Invalid appointment status.')
        return normalized


class DoctorSummaryResponse(BaseModel):
    name: str
    specialization: str
    location: str | None = None


class AppointmentResponse(BaseModel):
    id: str
    doctor_id: str
    patient_id: str
    date: date
    time: str
    type: str
    status: str
    consultation_fee: int
    notes: str | None = None
    created_at: datetime
    updated_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    rescheduled_at: datetime | None = None
    doctor: DoctorSummaryResponse | None = None


class AppointmentListResponse(BaseModel):
    appointments: list[AppointmentResponse]
    total: int


class DoctorAppointmentsResponse(BaseModel):
    appointments: list[AppointmentResponse]
    today: list[AppointmentResponse]
    upcoming: list[AppointmentResponse]
    past: list[AppointmentResponse]
    cancelled: list[AppointmentResponse]
    total: int


def to_appointment_response(appointment: Appointment, db: Session) -> AppointmentResponse:
    doctor = find_doctor(appointment.doctor_id, db)

    return AppointmentResponse(
        id=appointment.id,
        doctor_id=appointment.doctor_id,
        patient_id=appointment.patient_id,
        date=appointment.date,
        time=appointment.time,
        type=appointment.appointment_type,
        status=appointment.status,
        consultation_fee=appointment.consultation_fee,
        notes=appointment.notes,
        created_at=appointment.created_at,
        updated_at=appointment.updated_at,
        cancelled_at=appointment.cancelled_at,
        cancellation_reason=appointment.cancellation_reason,
        rescheduled_at=appointment.rescheduled_at,
        doctor=DoctorSummaryResponse(
            name=doctor.name,
            specialization=doctor.specialization,
            location=doctor.location,
        ) if doctor else None,
    )


@router.get('', response_model=AppointmentListResponse)
def list_appointments(
    patient_id: str | None = Query(default=None),
    status_filter: str | None = Query(default=None, alias='status'),
    db: Session = Depends(get_db),
):
    try:
        appointments = booking.list_appointments(db, patient_id=patient_id, status=status_filter)

        return AppointmentListResponse(
            appointments=[to_appointment_response(appointment, db) for appointment in appointments],
            total=len(appointments),
        )
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(data: CreateAppointmentRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        appointment = booking.book_appointment(
            db,
            doctor_id=data.doctor_id,
            patient_id=data.patient_id,
            appointment_date=data.date,
            time=data.time,
            appointment_type=data.type,
            notes=data.notes,
        )
        return to_appointment_response(appointment, db)
    except BookingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.get('/doctor/{doctor_id}', response_model=DoctorAppointmentsResponse)
def list_doctor_appointments(doctor_id: str, db: Session = Depends(get_db)):
    try:
        grouped = booking.group_doctor_appointments(doctor_id, db)

        return DoctorAppointmentsResponse(
            appointments=[to_appointment_response(a, db) for a in grouped['all']],
            today=[to_appointment_response(a, db) for a in grouped['today']],
            upcoming=[to_appointment_response(a, db) for a in grouped['upcoming']],
            past=[to_appointment_response(a, db) for a in grouped['past']],
            cancelled=[to_appointment_response(a, db) for a in grouped['cancelled']],
            total=len(grouped['all']),
        )
    except BookingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/{appointment_id}', response_model=AppointmentResponse)
def get_appointment(appointment_id: str, db: Session = Depends(get_db)):
    try:
        return to_appointment_response(booking.get_appointment(appointment_id, db), db)
    except BookingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.put('/{appointment_id}', response_model=AppointmentResponse)
def reschedule_appointment(
    appointment_id: str,
    data: RescheduleAppointmentRequest,
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        appointment = booking.reschedule_appointment(
            appointment_id,
            db,
            new_date=data.new_date,
            new_time=data.new_time,
        )
        return to_appointment_response(appointment, db)
    except BookingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.delete('/{appointment_id}', response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: str,
    reason: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    try:
        appointment = booking.cancel_appointment(appointment_id, db, reason=reason)
        return to_appointment_response(appointment, db)
    except BookingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.patch('/{appointment_id}/status', response_model=AppointmentResponse)
def update_appointment_status(
    appointment_id: str,
    data: UpdateAppointmentStatusRequest,
    db: Session = Depends(get_db),
):
    try:
        appointment = booking.update_appointment_status(appointment_id, data.status, db, notes=data.notes)
        return to_appointment_response(appointment, db)
    except BookingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc
