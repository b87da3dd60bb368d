"""Booking, cancellation and rescheduling of appointments.

Booking and rescheduling check for a conflicting appointment and write the
result while holding ``_booking_lock`` so that two requests for the same slot
cannot both pass the check. Cancellations and status changes take the same
lock, and the reschedule write only applies to a still-active appointment.
The partial unique index on
``(doctor_id, date, slot_minute)`` covers writers outside this process; its
``IntegrityError`` is reported as a conflict.
"""

import logging
import uuid
from datetime import date, datetime
from threading import Lock

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from medibook.core import config
from medibook.errors import ConflictError, InvalidOperationError, InvalidRequestError, NotFoundError
from medibook.models.appointment import Appointment
from medibook.models.doctor import Doctor
from medibook.scheduling.directory import get_doctor
from medibook.scheduling.timeslots import format_slot_time, parse_calendar_date, parse_slot_time

logger = logging.getLogger(__name__)

_booking_lock = Lock()

SCHEDULED = 'scheduled'
CONFIRMED = 'confirmed'
COMPLETED = 'completed'
CANCELLED = 'cancelled'
APPOINTMENT_STATUSES = (SCHEDULED, CONFIRMED, COMPLETED, CANCELLED)
ACTIVE_STATUSES = (SCHEDULED, CONFIRMED)
ALLOWED_TRANSITIONS = {
    SCHEDULED: {CONFIRMED, COMPLETED, CANCELLED},
    CONFIRMED: {COMPLETED, CANCELLED},
    COMPLETED: set(),
    CANCELLED: set(),
}

IN_PERSON = 'in-person'
VIDEO = 'video'
APPOINTMENT_TYPES = (IN_PERSON, VIDEO)


def calculate_consultation_fee(doctor: Doctor, appointment_type: str) -> int:
    if appointment_type == VIDEO:
        return max(0, doctor.consultation_fee - config.VIDEO_CONSULTATION_DISCOUNT)
    return doctor.consultation_fee


def find_conflicting_appointment(
    doctor_id: str,
    appointment_date: date,
    slot_minute: int,
    db: Session,
    exclude_appointment_id: str | None = None,
) -> Appointment | None:
    query = db.query(Appointment).filter(
        Appointment.doctor_id == doctor_id,
        Appointment.date == appointment_date,
        Appointment.slot_minute == slot_minute,
        Appointment.status != CANCELLED,
    )
    if exclude_appointment_id is not None:
        query = query.filter(Appointment.id != exclude_appointment_id)
    return query.first()


def get_appointment(appointment_id: str, db: Session) -> Appointment:
    appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
    if appointment is None:
        raise NotFoundError('Appointment not found.')
    return appointment


def _require_fields(**fields) -> None:
    missing_fields = [
        name for name, value in fields.items()
        if value is None or (isinstance(value, str) and not value.strip())
    ]
    if missing_fields:
        raise InvalidRequestError(f'Missing required fields: {", ".join(missing_fields)}')


def _normalize_notes(notes: str | None) -> str:
    normalized = (notes or '').strip()
    if len(normalized) > config.MAX_APPOINTMENT_NOTES_LENGTH:
        raise InvalidRequestError(f'Notes must be {config.MAX_APPOINTMENT_NOTES_LENGTH} characters or fewer.')
    return normalized


def _new_appointment_id() -> str:
    return f'apt-{uuid.uuid4().hex[:12]}'


def book_appointment(
    db: Session,
    doctor_id: str,
    patient_id: str,
    appointment_date: date | str,
    time: str,
    appointment_type: str,
    notes: str | None = None,
    now: datetime | None = None,
) -> Appointment:
    _require_fields(
        doctor_id=doctor_id,
        patient_id=patient_id,
        date=appointment_date,
        time=time,
        type=appointment_type,
    )

    normalized_type = appointment_type.strip().lower()
    if normalized_type not in APPOINTMENT_TYPES:
        raise InvalidRequestError(f'Appointment type must be one of: {", ".join(APPOINTMENT_TYPES)}.')

    appointment_date = parse_calendar_date(appointment_date)
    slot_minute = parse_slot_time(time)
    normalized_notes = _normalize_notes(notes)

    doctor = get_doctor(doctor_id, db)

    with _booking_lock:
        if find_conflicting_appointment(doctor.id, appointment_date, slot_minute, db):
            raise ConflictError('Time slot is already booked.')

        appointment = Appointment(
            id=_new_appointment_id(),
            doctor_id=doctor.id,
            patient_id=patient_id.strip(),
            date=appointment_date,
            slot_minute=slot_minute,
            time=format_slot_time(slot_minute),
            appointment_type=normalized_type,
            status=SCHEDULED,
            consultation_fee=calculate_consultation_fee(doctor, normalized_type),
            notes=normalized_notes,
            created_at=now or datetime.now(),
        )
        db.add(appointment)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ConflictError('Time slot is already booked.') from exc
        db.refresh(appointment)

    logger.info(
        'Booked appointment %s with doctor %s on %s at %s',
        appointment.id,
        appointment.doctor_id,
        appointment.date.isoformat(),
        appointment.time,
    )
    return appointment


def cancel_appointment(
    appointment_id: str,
    db: Session,
    reason: str | None = None,
    now: datetime | None = None,
) -> Appointment:
    with _booking_lock:
        appointment = get_appointment(appointment_id, db)

        if appointment.status == CANCELLED:
            raise InvalidOperationError('Appointment is already cancelled.')
        if appointment.status == COMPLETED:
            raise InvalidOperationError('Completed appointments cannot be cancelled.')

        timestamp = now or datetime.now()
        appointment.status = CANCELLED
        appointment.cancelled_at = timestamp
        appointment.updated_at = timestamp
        if reason and reason.strip():
            appointment.cancellation_reason = reason.strip()

        db.commit()
        db.refresh(appointment)

    logger.info('Cancelled appointment %s', appointment.id)
    return appointment


def reschedule_appointment(
    appointment_id: str,
    db: Session,
    new_date: date | str | None = None,
    new_time: str | None = None,
    now: datetime | None = None,
) -> Appointment:
    """Move an appointment to a new date and/or time.

    The appointment's own current slot never counts as a conflict. When the
    new slot is taken the stored appointment is left unchanged.
    """
    if new_date is None and new_time is None:
        raise InvalidRequestError('Provide a new date or time to reschedule.')

    with _booking_lock:
        appointment = get_appointment(appointment_id, db)

        if appointment.status in (CANCELLED, COMPLETED):
            raise InvalidOperationError(f'Cannot modify {appointment.status} appointment.')

        target_date = parse_calendar_date(new_date) if new_date is not None else appointment.date
        target_minute = parse_slot_time(new_time) if new_time is not None else appointment.slot_minute

        conflict = find_conflicting_appointment(
            appointment.doctor_id,
            target_date,
            target_minute,
            db,
            exclude_appointment_id=appointment.id,
        )
        if conflict:
            raise ConflictError('Time slot is already booked.')

        # The status filter makes the write fail if another session closed the
        # appointment after it was read above.
        timestamp = now or datetime.now()
        try:
            updated_rows = db.query(Appointment).filter(
                Appointment.id == appointment.id,
                Appointment.status.in_(ACTIVE_STATUSES),
            ).update(
                {
                    Appointment.date: target_date,
                    Appointment.slot_minute: target_minute,
                    Appointment.time: format_slot_time(target_minute),
                    Appointment.status: SCHEDULED,
                    Appointment.rescheduled_at: timestamp,
                    Appointment.updated_at: timestamp,
                },
                synchronize_session=False,
            )
            if updated_rows == 0:
                db.rollback()
                raise InvalidOperationError('Appointment was closed before it could be rescheduled.')
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ConflictError('Time slot is already booked.') from exc
        db.refresh(appointment)

    logger.info(
        'Rescheduled appointment %s to %s at %s',
        appointment.id,
        appointment.date.isoformat(),
        appointment.time,
    )
    return appointment


def update_appointment_status(
    appointment_id: str,
    new_status: str,
    db: Session,
    notes: str | None = None,
    now: datetime | None = None,
) -> Appointment:
    """Doctor-side status change (confirm, complete or cancel)."""
    normalized_status = (new_status or '').strip().lower()
    if normalized_status not in APPOINTMENT_STATUSES:
        raise InvalidRequestError(f'Status must be one of: {", ".join(APPOINTMENT_STATUSES)}.')

    if normalized_status == CANCELLED:
        return cancel_appointment(appointment_id, db, reason=notes, now=now)

    normalized_notes = _normalize_notes(notes) if notes is not None else None

    with _booking_lock:
        appointment = get_appointment(appointment_id, db)

        if normalized_status not in ALLOWED_TRANSITIONS.get(appointment.status, set()):
            raise InvalidOperationError(
                f'Cannot change appointment status from {appointment.status} to {normalized_status}.'
            )

        appointment.status = normalized_status
        appointment.updated_at = now or datetime.now()
        if normalized_notes is not None:
            appointment.notes = normalized_notes

        db.commit()
        db.refresh(appointment)

    logger.info('Appointment %s marked %s', appointment.id, normalized_status)
    return appointment


def list_appointments(db: Session, patient_id: str | None = None, status: str | None = None) -> list[Appointment]:
    query = db.query(Appointment)
    if patient_id:
        query = query.filter(Appointment.patient_id == patient_id)
    if status:
        query = query.filter(Appointment.status == status.strip().lower())
    return query.order_by(Appointment.date.asc(), Appointment.slot_minute.asc()).all()


def group_doctor_appointments(doctor_id: str, db: Session, today: date | None = None) -> dict[str, list[Appointment]]:
    get_doctor(doctor_id, db)
    today = today or date.today()

    appointments = db.query(Appointment).filter(
        Appointment.doctor_id == doctor_id,
    ).order_by(Appointment.date.asc(), Appointment.slot_minute.asc()).all()

    return {
        'all': appointments,
        'today': [a for a in appointments if a.date == today and a.status in ACTIVE_STATUSES],
        'upcoming': [a for a in appointments if a.date >= today and a.status in ACTIVE_STATUSES],
        'past': [a for a in appointments if (a.date < today and a.status != CANCELLED) or a.status == COMPLETED],
        'cancelled': [a for a in appointments if a.status == CANCELLED],
    }
