from datetime import date, timedelta

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from medibook.routes.availability_routes import (
    SetAvailabilityRequest,
    get_doctor_availability,
    list_doctor_availability,
    set_doctor_availability,
)
from medibook.routes.doctor_routes import (
    DoctorFieldsRequest,
    create_doctor,
    get_doctor,
    list_doctor_slots,
    list_doctors,
    list_specialties,
    update_doctor,
)
from medibook.seed import seed_demo_doctors


@pytest.fixture(autouse=True)
def skip_schema_guard(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr('medibook.routes.doctor_routes.ensure_database_ready', lambda: None)


def test_list_doctors_paginates_search_results(db) -> None:
    seed_demo_doctors(db)

    response = list_doctors(q='', specialty='', page=2, limit=4, db=db)

    assert [doctor.id for doctor in response.doctors] == ['5', 'demo']
    assert response.pagination.total == 6
    assert response.pagination.total_pages == 2
    assert response.pagination.has_prev is True
    assert response.pagination.has_next is False
    assert response.message == 'Found 6 doctors'


def test_list_specialties_lists_every_specialization(db) -> None:
    seed_demo_doctors(db)

    specialties = list_specialties(db=db)

    assert {specialty.name for specialty in specialties} == {
        'General Physician',
        'Psychologist',
        'Cardiologist',
        'Dermatologist',
        'Pediatrician',
        'Orthopedic',
    }


def test_get_doctor_returns_not_found(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_doctor(doctor_id='99', db=db)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == {'error': 'not_found', 'message': 'Doctor with ID 99 not found.'}


def test_create_doctor_reports_missing_fields(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        create_doctor(data=DoctorFieldsRequest(name=' Dr. New '), db=db)

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == {
        'error': 'validation_error',
        'message': 'Missing required fields: specialization, experience, consultation_fee, location',
    }


def test_doctor_fields_request_rejects_negative_fee() -> None:
    with pytest.raises(ValidationError):
        DoctorFieldsRequest(consultation_fee=-1)


def test_update_doctor_changes_fee(db, make_doctor) -> None:
    make_doctor()

    response = update_doctor(doctor_id='1', data=DoctorFieldsRequest(consultation_fee=900), db=db)

    assert response.consultation_fee == 900
    assert response.name == 'Dr. Prakash Das'


def test_list_doctor_slots_for_future_date(db, make_doctor) -> None:
    make_doctor()
    next_week = date.today() + timedelta(days=7)

    response = list_doctor_slots(doctor_id='1', slot_date=next_week, db=db)

    assert response['total_slots'] == 18
    assert response['available_slots'] == 18
    assert response['doctor_name'] == 'Dr. Prakash Das'


def test_list_doctor_slots_rejects_past_date(db, make_doctor) -> None:
    make_doctor()

    with pytest.raises(HTTPException) as exception_info:
        list_doctor_slots(doctor_id='1', slot_date=date(2000, 1, 1), db=db)

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == {
        'error': 'invalid_date',
        'message': 'Cannot book appointments for past dates.',
    }


def test_set_availability_request_normalizes_time_slots() -> None:
    request = SetAvailabilityRequest(
        doctor_id=' 1 ',
        date=date(2026, 1, 6),
        is_available=True,
        time_slots=['09:00', '14:30'],
    )

    assert request.doctor_id == '1'
    assert request.time_slots == ['9:00 AM', '2:30 PM']


def test_set_availability_request_rejects_bad_time_slot() -> None:
    with pytest.raises(ValidationError):
        SetAvailabilityRequest(doctor_id='1', date=date(2026, 1, 6), is_available=True, time_slots=['later'])


def test_availability_override_round_trip_through_routes(db, make_doctor) -> None:
    make_doctor()
    target = date(2026, 1, 6)

    assert get_doctor_availability(doctor_id='1', override_date=target, db=db) is None

    set_doctor_availability(
        data=SetAvailabilityRequest(doctor_id='1', date=target, is_available=False, notes='Conference'),
        db=db,
    )

    override = get_doctor_availability(doctor_id='1', override_date=target, db=db)
    assert override.is_available is False
    assert override.notes == 'Conference'
    assert len(list_doctor_availability(doctor_id='1', db=db)) == 1


def test_availability_routes_return_not_found_for_unknown_doctor(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        list_doctor_availability(doctor_id='missing', db=db)

    assert exception_info.value.status_code == 404
