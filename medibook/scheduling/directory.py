"""Doctor directory and availability override access."""

import logging
from datetime import date, datetime

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from medibook.errors import InvalidRequestError, NotFoundError
from medibook.models.availability import AvailabilityOverride
from medibook.models.doctor import Doctor
from medibook.scheduling.timeslots import WEEKDAY_NAMES

logger = logging.getLogger(__name__)

ALL_SPECIALTIES = 'all'
REQUIRED_DOCTOR_FIELDS = ('name', 'specialization', 'experience', 'consultation_fee', 'location')
DEFAULT_WORKING_DAYS = list(WEEKDAY_NAMES[:5])
UPDATABLE_DOCTOR_FIELDS = {
    'name',
    'specialization',
    'experience',
    'rating',
    'review_count',
    'consultation_fee',
    'location',
    'working_days',
    'working_hours',
    'languages',
    'qualifications',
    'about',
    'phone_number',
    'email',
    'is_available',
}


def find_doctor(doctor_id: str, db: Session) -> Doctor | None:
    return db.query(Doctor).filter(Doctor.id == doctor_id).first()


def get_doctor(doctor_id: str, db: Session) -> Doctor:
    doctor = find_doctor(doctor_id, db)
    if doctor is None:
        raise NotFoundError(f'Doctor with ID {doctor_id} not found.')
    return doctor


def search_doctors(db: Session, query: str = '', specialty: str = '') -> list[Doctor]:
    """Match ``query`` against name, specialization and location."""
    doctors = db.query(Doctor)

    normalized_query = query.strip().lower()
    if normalized_query:
        pattern = f'%{normalized_query}%'
        doctors = doctors.filter(
            or_(
                func.lower(Doctor.name).like(pattern),
                func.lower(Doctor.specialization).like(pattern),
                func.lower(Doctor.location).like(pattern),
            )
        )

    normalized_specialty = specialty.strip().lower()
    if normalized_specialty and normalized_specialty != ALL_SPECIALTIES:
        doctors = doctors.filter(func.lower(Doctor.specialization) == normalized_specialty)

    return doctors.order_by(Doctor.id.asc()).all()


def paginate(items: list, page: int, limit: int) -> tuple[list, dict]:
    start_index = (page - 1) * limit
    end_index = start_index + limit
    total = len(items)

    return items[start_index:end_index], {
        'current_page': page,
        'per_page': limit,
        'total': total,
        'total_pages': (total + limit - 1) // limit,
        'has_next': end_index < total,
        'has_prev': page > 1,
    }


def list_specialties(db: Session) -> list[dict]:
    counts: dict[str, dict] = {}
    for doctor in db.query(Doctor).order_by(Doctor.id.asc()).all():
        entry = counts.setdefault(
            doctor.specialization,
            {'name': doctor.specialization, 'count': 0, 'available_doctors': 0},
        )
        entry['count'] += 1
        if doctor.is_available:
            entry['available_doctors'] += 1

    return sorted(counts.values(), key=lambda entry: entry['count'], reverse=True)


def _validate_working_days(working_days: list[str]) -> list[str]:
    normalized = []
    for day in working_days:
        name = day.strip().capitalize()
        if name not in WEEKDAY_NAMES:
            raise InvalidRequestError(f'Invalid working day "{day}".')
        if name not in normalized:
            normalized.append(name)
    return normalized


def next_doctor_id(db: Session) -> str:
    numeric_ids = [int(doctor_id) for (doctor_id,) in db.query(Doctor.id).all() if doctor_id.isdigit()]
    return str(max(numeric_ids, default=0) + 1)


def create_doctor(data: dict, db: Session) -> Doctor:
    missing_fields = [field for field in REQUIRED_DOCTOR_FIELDS if data.get(field) in (None, '')]
    if missing_fields:
        raise InvalidRequestError(f'Missing required fields: {", ".join(missing_fields)}')

    doctor = Doctor(
        id=next_doctor_id(db),
        name=data['name'],
        specialization=data['specialization'],
        experience=data['experience'],
        rating=data.get('rating') or 4.5,
        review_count=data.get('review_count') or 0,
        consultation_fee=data['consultation_fee'],
        location=data['location'],
        working_days=_validate_working_days(data.get('working_days') or DEFAULT_WORKING_DAYS),
        working_hours=data.get('working_hours') or '9:00 AM - 6:00 PM',
        languages=data.get('languages') or ['English'],
        qualifications=data.get('qualifications') or [],
        about=data.get('about') or '',
        phone_number=data.get('phone_number'),
        email=data.get('email'),
        is_available=data.get('is_available') is not False,
    )
    db.add(doctor)
    db.commit()
    db.refresh(doctor)

    logger.info('Added doctor %s (%s)', doctor.id, doctor.specialization)
    return doctor


def update_doctor(doctor_id: str, changes: dict, db: Session) -> Doctor:
    doctor = get_doctor(doctor_id, db)

    for field, value in changes.items():
        if field not in UPDATABLE_DOCTOR_FIELDS or value is None:
            continue
        if field == 'working_days':
            value = _validate_working_days(value)
        setattr(doctor, field, value)

    db.commit()
    db.refresh(doctor)
    return doctor


def get_availability_override(doctor_id: str, override_date: date, db: Session) -> AvailabilityOverride | None:
    return db.query(AvailabilityOverride).filter(
        AvailabilityOverride.doctor_id == doctor_id,
        AvailabilityOverride.date == override_date,
    ).first()


def list_availability_overrides(doctor_id: str, db: Session) -> list[AvailabilityOverride]:
    get_doctor(doctor_id, db)
    return db.query(AvailabilityOverride).filter(
        AvailabilityOverride.doctor_id == doctor_id,
    ).order_by(AvailabilityOverride.date.asc()).all()


def set_availability_override(
    doctor_id: str,
    override_date: date,
    is_available: bool,
    db: Session,
    notes: str = '',
    time_slots: list[str] | None = None,
    now: datetime | None = None,
) -> AvailabilityOverride:
    get_doctor(doctor_id, db)

    override = get_availability_override(doctor_id, override_date, db)
    if override is None:
        override = AvailabilityOverride(doctor_id=doctor_id, date=override_date)
        db.add(override)

    override.is_available = is_available
    override.notes = notes or ''
    override.time_slots = list(time_slots or [])
    override.updated_at = now or datetime.now()

    db.commit()
    db.refresh(override)

    logger.info(
        'Availability for doctor %s on %s set to %s',
        doctor_id,
        override_date.isoformat(),
        'available' if is_available else 'unavailable',
    )
    return override
