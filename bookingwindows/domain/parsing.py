"""
Parsing of user-supplied dates and clock times.

Anything unparseable is a hard input error.
"""

from datetime import time

import pendulum
from pendulum import DateTime

from .exceptions import InvalidInputError


def parse_date(value: str) -> pendulum.Date:
    """Parse a ``YYYY-MM-DD`` date."""
    try:
        return pendulum.from_format(value.strip(), "YYYY-MM-DD").date()
    except ValueError as exc:
        raise InvalidInputError(f"Invalid date '{value}', expected YYYY-MM-DD") from exc


def parse_time_of_day(value: str) -> time:
    """Parse a ``HH:mm`` clock time."""
    try:
        parsed = pendulum.from_format(value.strip(), "HH:mm")
    except ValueError as exc:
        raise InvalidInputError(f"Invalid time '{value}', expected HH:mm") from exc
    return time(hour=parsed.hour, minute=parsed.minute)


def parse_datetime(value: str, timezone: str) -> DateTime:
    """
    Parse an ISO 8601 or ``YYYY-MM-DD HH:mm`` instant into the operating zone.

    Naive values are interpreted in ``timezone``; offset-aware values are converted.
    """
    try:
        parsed = pendulum.parse(value.strip(), tz=timezone)
    except ValueError as exc:
        raise InvalidInputError(f"Invalid date/time '{value}'") from exc

    if not isinstance(parsed, DateTime):
        raise InvalidInputError(f"Expected a date and time, got '{value}'")

    return parsed.in_timezone(timezone)
