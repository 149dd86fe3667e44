"""
Domain-specific exception hierarchy for the scheduling engine.

Expected scheduling outcomes (conflicts, invalid ranges, blocked dates) are
returned as typed results; only malformed input and feed failures raise.
"""


class SchedulingError(Exception):
    """Base class for all application-level errors."""


class InvalidInputError(SchedulingError, ValueError):
    """Raised for unparseable dates/times, bad durations or inconsistent specs."""


class CalendarFeedError(SchedulingError):
    """Raised when busy events or bookings cannot be fetched or parsed."""
