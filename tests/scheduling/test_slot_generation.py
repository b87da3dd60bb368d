from datetime import date, datetime

import pytest

from medibook.errors import InvalidDateError, NotFoundError
from medibook.scheduling.booking import book_appointment, cancel_appointment
from medibook.scheduling.directory import set_availability_override
from medibook.scheduling.slots import generate_time_slots, get_booked_slot_minutes, get_slots

# Monday
NOW = datetime(2026, 1, 5, 10, 15)
TUESDAY = date(2026, 1, 6)
SUNDAY = date(2026, 1, 11)


def _all_slots(result: dict) -> list[dict]:
    return result['slots']['morning'] + result['slots']['afternoon'] + result['slots']['evening']


def test_get_slots_covers_working_window_in_half_hour_steps(db, make_doctor) -> None:
    make_doctor()

    result = get_slots('1', TUESDAY, db, now=NOW)

    times = [slot['time'] for slot in _all_slots(result)]
    assert result['total_slots'] == 18
    assert result['available_slots'] == 18
    assert result['is_working_day'] is True
    assert result['day_of_week'] == 'Tuesday'
    assert times[0] == '9:00 AM'
    assert times[-1] == '5:30 PM'
    assert '6:00 PM' not in times


def test_get_slots_groups_slots_by_time_of_day(db, make_doctor) -> None:
    make_doctor()

    result = get_slots('1', TUESDAY, db, now=NOW)

    assert len(result['slots']['morning']) == 6
    assert len(result['slots']['afternoon']) == 10
    assert [slot['time'] for slot in result['slots']['evening']] == ['5:00 PM', '5:30 PM']


def test_get_slots_returns_nothing_on_non_working_day(db, make_doctor) -> None:
    make_doctor(working_days=['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday'])

    result = get_slots('1', SUNDAY, db, now=NOW)

    assert result['is_working_day'] is False
    assert result['total_slots'] == 0
    assert result['slots'] == {'morning': [], 'afternoon': [], 'evening': []}


def test_get_slots_today_only_offers_future_slots(db, make_doctor) -> None:
    make_doctor()

    result = get_slots('1', NOW.date(), db, now=NOW)

    slots = _all_slots(result)
    assert slots[0]['time'] == '10:30 AM'
    assert all(slot['slot_minute'] > 10 * 60 + 15 for slot in slots)


def test_get_slots_today_drops_slot_starting_at_current_minute(db, make_doctor) -> None:
    make_doctor()

    result = get_slots('1', NOW.date(), db, now=datetime(2026, 1, 5, 10, 30, 45))

    assert _all_slots(result)[0]['time'] == '11:00 AM'


def test_get_slots_rejects_past_dates(db, make_doctor) -> None:
    make_doctor()

    with pytest.raises(InvalidDateError):
        get_slots('1', '2000-01-01', db, now=NOW)


def test_get_slots_rejects_unknown_doctor(db) -> None:
    with pytest.raises(NotFoundError):
        get_slots('missing', TUESDAY, db, now=NOW)


def test_get_slots_marks_booked_slot_unavailable(db, make_doctor) -> None:
    make_doctor()
    book_appointment(db, '1', 'patient-1', TUESDAY, '10:00 AM', 'in-person', now=NOW)

    result = get_slots('1', TUESDAY, db, now=NOW)

    booked = [slot for slot in _all_slots(result) if not slot['available']]
    assert [slot['time'] for slot in booked] == ['10:00 AM']
    assert result['available_slots'] == result['total_slots'] - 1


def test_get_slots_matches_bookings_by_minute_not_display_text(db, make_doctor) -> None:
    make_doctor()
    book_appointment(db, '1', 'patient-1', TUESDAY, '14:30', 'video', now=NOW)

    result = get_slots('1', TUESDAY, db, now=NOW)

    slot = next(slot for slot in _all_slots(result) if slot['time'] == '2:30 PM')
    assert slot['available'] is False


def test_get_slots_ignores_cancelled_appointments(db, make_doctor) -> None:
    make_doctor()
    appointment = book_appointment(db, '1', 'patient-1', TUESDAY, '10:00 AM', 'in-person', now=NOW)
    cancel_appointment(appointment.id, db, now=NOW)

    result = get_slots('1', TUESDAY, db, now=NOW)

    assert result['available_slots'] == result['total_slots']


def test_get_slots_is_idempotent(db, make_doctor) -> None:
    make_doctor()
    book_appointment(db, '1', 'patient-1', TUESDAY, '11:30 AM', 'in-person', now=NOW)

    assert get_slots('1', TUESDAY, db, now=NOW) == get_slots('1', TUESDAY, db, now=NOW)


def test_get_slots_honours_unavailable_override(db, make_doctor) -> None:
    make_doctor()
    set_availability_override('1', TUESDAY, False, db, notes='Conference', now=NOW)

    result = get_slots('1', TUESDAY, db, now=NOW)

    assert result['total_slots'] == 0
    assert result['is_working_day'] is True
    assert result['override_notes'] == 'Conference'
    assert result['message'] == 'Conference'


def test_get_slots_ignores_available_override(db, make_doctor) -> None:
    make_doctor()
    set_availability_override('1', TUESDAY, True, db, notes='Regular hours', now=NOW)

    result = get_slots('1', TUESDAY, db, now=NOW)

    assert result['total_slots'] == 18


def test_generate_time_slots_assigns_sequential_ids(make_doctor) -> None:
    doctor = make_doctor()

    slots = generate_time_slots(doctor, TUESDAY, set(), NOW)

    assert slots[0]['id'] == 'slot-1-2026-01-06-1'
    assert slots[-1]['id'] == 'slot-1-2026-01-06-18'
    assert all(slot['doctor_id'] == '1' and slot['date'] == TUESDAY for slot in slots)


def test_get_booked_slot_minutes_is_scoped_to_doctor_and_date(db, make_doctor) -> None:
    make_doctor('1')
    make_doctor('2', name='Dr. Sarah Wilson', specialization='Cardiologist')
    book_appointment(db, '1', 'patient-1', TUESDAY, '9:00 AM', 'in-person', now=NOW)
    book_appointment(db, '2', 'patient-1', TUESDAY, '9:30 AM', 'in-person', now=NOW)
    book_appointment(db, '1', 'patient-1', date(2026, 1, 7), '10:00 AM', 'in-person', now=NOW)

    assert get_booked_slot_minutes('1', TUESDAY, db) == {540}
