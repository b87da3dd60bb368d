from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from medibook.database import ensure_database_ready, get_db
from medibook.errors import BookingError, database_unavailable, to_http_exception
from medibook.scheduling import directory
from medibook.scheduling.slots import get_slots

router = APIRouter(tags=['doctors'])

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class DoctorResponse(BaseModel):
    id: str
    name: str
    specialization: str
    experience: str | None = None
    rating: float | None = None
    review_count: int | None = None
    consultation_fee: int
    location: str | None = None
    working_days: list[str] = []
    working_hours: str | None = None
    languages: list[str] = []
    qualifications: list[str] = []
    about: str | None = None
    phone_number: str | None = None
    email: str | None = None
    is_available: bool = True

    class Config:
        from_attributes = True


class PaginationResponse(BaseModel):
    current_page: int
    per_page: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class DoctorListResponse(BaseModel):
    doctors: list[DoctorResponse]
    pagination: PaginationResponse
    message: str


class SpecialtyResponse(BaseModel):
    name: str
    count: int
    available_doctors: int


class DoctorFieldsRequest(BaseModel):
    name: str | None = None
    specialization: str | None = None
    experience: str | None = None
    rating: float | None = None
    review_count: int | None = None
    consultation_fee: int | None = None
    location: str | None = None
    working_days: list[str] | None = None
    working_hours: str | None = None
    languages: list[str] | None = None
    qualifications: list[str] | None = None
    about: str | None = None
    phone_number: str | None = None
    email: str | None = None
    is_available: bool | None = None

    @field_validator('name', 'specialization', 'experience', 'location', 'working_hours', 'about')
    @classmethod
    def strip_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip()

    @field_validator('consultation_fee')
    @classmethod
    def validate_consultation_fee(cls, value: int | None) -> int | None:
        if value is not None and value < 0:
            raise ValueError('Consultation fee cannot be negative.')
        return value


class TimeSlotResponse(BaseModel):
    id: str
    time: str
    type: str
    available: bool
    date: date
    doctor_id: str


class SlotGroupsResponse(BaseModel):
    morning: list[TimeSlotResponse]
    afternoon: list[TimeSlotResponse]
    evening: list[TimeSlotResponse]


class DoctorSlotsResponse(BaseModel):
    doctor_id: str
    doctor_name: str
    date: date
    day_of_week: str
    slots: SlotGroupsResponse
    total_slots: int
    available_slots: int
    working_hours: str | None = None
    is_working_day: bool
    override_notes: str | None = None
    message: str


@router.get('', response_model=DoctorListResponse)
def list_doctors(
    q: str = Query(default=''),
    specialty: str = Query(default=''),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    try:
        doctors = directory.search_doctors(db, query=q, specialty=specialty)
        page_items, pagination = directory.paginate(doctors, page, limit)

        return DoctorListResponse(
            doctors=[DoctorResponse.model_validate(doctor) for doctor in page_items],
            pagination=PaginationResponse(**pagination),
            message=f'Found {len(doctors)} doctors',
        )
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/specialties', response_model=list[SpecialtyResponse])
def list_specialties(db: Session = Depends(get_db)):
    try:
        return [SpecialtyResponse(**entry) for entry in directory.list_specialties(db)]
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('', response_model=DoctorResponse, status_code=status.HTTP_201_CREATED)
def create_doctor(data: DoctorFieldsRequest, db: Session = Depends(get_db)):
    try:
        return directory.create_doctor(data.model_dump(), db)
    except BookingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.get('/{doctor_id}', response_model=DoctorResponse)
def get_doctor(doctor_id: str, db: Session = Depends(get_db)):
    try:
        return directory.get_doctor(doctor_id, db)
    except BookingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.put('/{doctor_id}', response_model=DoctorResponse)
def update_doctor(doctor_id: str, data: DoctorFieldsRequest, db: Session = Depends(get_db)):
    try:
        return directory.update_doctor(doctor_id, data.model_dump(exclude_none=True), db)
    except BookingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.get('/{doctor_id}/slots', response_model=DoctorSlotsResponse)
def list_doctor_slots(
    doctor_id: str,
    slot_date: date | None = Query(default=None, alias='date'),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        now = datetime.now()
        return get_slots(doctor_id, slot_date or now.date(), db, now=now)
    except BookingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc
