"""Slot time helpers.

Slot times are compared as minutes since midnight. The ``h:mm AM/PM`` display
string is produced only when a slot or appointment leaves the service.
"""

import re
from datetime import date, datetime

from medibook.errors import InvalidRequestError

WEEKDAY_NAMES = ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday')

MORNING = 'morning'
AFTERNOON = 'afternoon'
EVENING = 'evening'
SLOT_TYPES = (MORNING, AFTERNOON, EVENING)

AFTERNOON_START_HOUR = 12
EVENING_START_HOUR = 17

_DISPLAY_TIME_PATTERN = re.compile(r'^(\d{1,2}):(\d{2})\s*([AaPp])\.?[Mm]\.?$')
_CLOCK_TIME_PATTERN = re.compile(r'^(\d{1,2}):(\d{2})(?::00)?$')


def weekday_name(value: date) -> str:
    return WEEKDAY_NAMES[value.weekday()]


def parse_calendar_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError) as exc:
        raise InvalidRequestError(f'Invalid date "{value}". Expected YYYY-MM-DD.') from exc


def parse_slot_time(value: str) -> int:
    """Parse ``"10:30 AM"`` or ``"14:00"`` into minutes since midnight."""
    if not isinstance(value, str):
        raise InvalidRequestError('Time must be a string such as "10:30 AM".')

    normalized = value.strip()
    display_match = _DISPLAY_TIME_PATTERN.match(normalized)
    if display_match:
        hour, minute = int(display_match.group(1)), int(display_match.group(2))
        if not 1 <= hour <= 12 or minute >= 60:
            raise InvalidRequestError(f'Invalid time "{value}".')
        is_pm = display_match.group(3).lower() == 'p'
        hour = hour % 12 + (12 if is_pm else 0)
        return hour * 60 + minute

    clock_match = _CLOCK_TIME_PATTERN.match(normalized)
    if clock_match:
        hour, minute = int(clock_match.group(1)), int(clock_match.group(2))
        if hour >= 24 or minute >= 60:
            raise InvalidRequestError(f'Invalid time "{value}".')
        return hour * 60 + minute

    raise InvalidRequestError(f'Invalid time "{value}". Expected a time such as "10:30 AM".')


def format_slot_time(slot_minute: int) -> str:
    hour, minute = divmod(slot_minute, 60)
    period = 'PM' if hour >= 12 else 'AM'
    display_hour = hour - 12 if hour > 12 else 12 if hour == 0 else hour
    return f'{display_hour}:{minute:02d} {period}'


def classify_slot(slot_minute: int) -> str:
    hour = slot_minute // 60
    if hour < AFTERNOON_START_HOUR:
        return MORNING
    if hour < EVENING_START_HOUR:
        return AFTERNOON
    return EVENING


def iterate_slot_minutes(start_hour: int, end_hour: int, interval_minutes: int) -> list[int]:
    return list(range(start_hour * 60, end_hour * 60, interval_minutes))


def minute_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute
