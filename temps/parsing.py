"""
Parsers for values typed on the command line.

Times and dates are resolved against the logical day given by the
CalendarService, so "09:00" or "yesterday" respect the midnight offset.
"""

import datetime
import re

from temps.domain.exceptions import InvalidTimeError
from temps.services.calendar_service import CalendarService

_DAYS_AGO_RE = re.compile(r"^(\d+)\s+days?\s+ago$")


def parse_time_of_day(src: str) -> datetime.time:
    """Parse ``HH:MM:SS`` or ``HH:MM``"""
    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return datetime.datetime.strptime(src.strip(), fmt).time()
        except ValueError:
            continue
    raise InvalidTimeError(f"Could not parse time '{src}'")


def parse_start_date(src: str, calendar: CalendarService,
                     now: datetime.datetime) -> datetime.datetime:
    """
    Parse a start or stop date.

    Expects either an RFC3339 date/time, or a time with format ``HH:MM:SS``
    or ``HH:MM``, in which case the date is taken from the current logical day.

    Args:
        src: Text from the command line
        calendar: Calendar used to resolve times of day and naive datetimes
        now: Current instant

    Returns:
        An aware datetime
    """
    try:
        parsed = datetime.datetime.fromisoformat(src.strip())
    except ValueError:
        return calendar.resolve_time(parse_time_of_day(src), now)
    if parsed.tzinfo is None:
        parsed = calendar.localize(parsed)
    return parsed


def parse_date(src: str, calendar: CalendarService, now: datetime.datetime) -> datetime.date:
    """
    Parse a date.

    Expects either ``YYYY-mm-dd``, ``today``, ``yesterday``, or ``N days ago``
    where ``N`` is a non-negative integer.
    """
    text = src.strip().lower()
    today = calendar.day_of(now)
    if text == "today":
        return today
    if text == "yesterday":
        return today - datetime.timedelta(days=1)
    match = _DAYS_AGO_RE.match(text)
    if match:
        return today - datetime.timedelta(days=int(match.group(1)))
    try:
        return datetime.date.fromisoformat(text)
    except ValueError:
        raise InvalidTimeError(
            f"Could not parse date '{src}' (expected YYYY-MM-DD, today, yesterday or 'N days ago')"
        ) from None
