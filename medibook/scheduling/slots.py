"""Bookable slot generation for one doctor on one date.

Slots are recomputed on every query and never stored. A slot is taken when a
non-cancelled appointment holds the same doctor, date and start minute.
"""

import logging
from datetime import date, datetime

from sqlalchemy.orm import Session

from medibook.core import config
from medibook.errors import InvalidDateError
from medibook.models.appointment import Appointment
from medibook.models.doctor import Doctor
from medibook.scheduling.directory import get_availability_override, get_doctor
from medibook.scheduling.timeslots import (
    SLOT_TYPES,
    classify_slot,
    format_slot_time,
    iterate_slot_minutes,
    minute_of_day,
    parse_calendar_date,
    weekday_name,
)

logger = logging.getLogger(__name__)

CANCELLED_STATUS = 'cancelled'


def is_working_day(doctor: Doctor, slot_date: date) -> bool:
    return weekday_name(slot_date) in (doctor.working_days or [])


def get_booked_slot_minutes(doctor_id: str, slot_date: date, db: Session) -> set[int]:
    booked = db.query(Appointment.slot_minute).filter(
        Appointment.doctor_id == doctor_id,
        Appointment.date == slot_date,
        Appointment.status != CANCELLED_STATUS,
    ).all()

    return {slot_minute for (slot_minute,) in booked}


def generate_time_slots(
    doctor: Doctor,
    slot_date: date,
    booked_minutes: set[int],
    now: datetime,
) -> list[dict]:
    """Return every slot of the working window, marking booked ones unavailable.

    On ``now``'s date only slots that start strictly after the current minute
    are kept.
    """
    if not is_working_day(doctor, slot_date):
        return []

    is_today = slot_date == now.date()
    current_minute = minute_of_day(now)

    slots = []
    slot_number = 1
    for slot_minute in iterate_slot_minutes(
        config.WORKING_START_HOUR,
        config.WORKING_END_HOUR,
        config.SLOT_INTERVAL_MINUTES,
    ):
        if is_today and slot_minute <= current_minute:
            continue

        slots.append({
            'id': f'slot-{doctor.id}-{slot_date.isoformat()}-{slot_number}',
            'time': format_slot_time(slot_minute),
            'slot_minute': slot_minute,
            'type': classify_slot(slot_minute),
            'available': slot_minute not in booked_minutes,
            'date': slot_date,
            'doctor_id': doctor.id,
        })
        slot_number += 1

    return slots


def group_slots(slots: list[dict]) -> dict[str, list[dict]]:
    grouped = {slot_type: [] for slot_type in SLOT_TYPES}
    for slot in slots:
        grouped[slot['type']].append(slot)
    return grouped


def get_slots(doctor_id: str, slot_date: date | str, db: Session, now: datetime | None = None) -> dict:
    now = now or datetime.now()
    slot_date = parse_calendar_date(slot_date)
    doctor = get_doctor(doctor_id, db)

    if slot_date < now.date():
        raise InvalidDateError('Cannot book appointments for past dates.')

    working_day = is_working_day(doctor, slot_date)
    override = get_availability_override(doctor.id, slot_date, db)

    if override is not None and not override.is_available:
        slots = []
        message = override.notes or 'Doctor is unavailable on this date'
    else:
        booked_minutes = get_booked_slot_minutes(doctor.id, slot_date, db)
        slots = generate_time_slots(doctor, slot_date, booked_minutes, now)
        message = 'Time slots generated successfully' if slots else 'No slots available for this date'

    logger.debug('Generated %d slots for doctor %s on %s', len(slots), doctor.id, slot_date.isoformat())

    return {
        'doctor_id': doctor.id,
        'doctor_name': doctor.name,
        'date': slot_date,
        'day_of_week': weekday_name(slot_date),
        'slots': group_slots(slots),
        'total_slots': len(slots),
        'available_slots': sum(1 for slot in slots if slot['available']),
        'working_hours': doctor.working_hours,
        'is_working_day': working_day,
        'override_notes': override.notes if override is not None else None,
        'message': message,
    }
