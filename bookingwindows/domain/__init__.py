"""
Domain layer - Pure business logic without external dependencies.
"""

from .coexistence import CoexistencePolicy
from .day_calculator import DayAvailabilityCalculator
from .engine import SchedulingEngine
from .exceptions import CalendarFeedError, InvalidInputError, SchedulingError
from .models import (
    BookingStatus,
    BufferPolicy,
    BusyEvent,
    ExistingBooking,
    OperatingHours,
    RecurrencePattern,
    RecurrenceSpec,
    ServiceKind,
    TimeRange,
)
from .multi_day import MultiDayScanner
from .policy import SchedulingPolicy
from .recurrence import RecurrenceExpander

__all__ = [
    "BookingStatus",
    "BufferPolicy",
    "BusyEvent",
    "CalendarFeedError",
    "CoexistencePolicy",
    "DayAvailabilityCalculator",
    "ExistingBooking",
    "InvalidInputError",
    "MultiDayScanner",
    "OperatingHours",
    "RecurrenceExpander",
    "RecurrencePattern",
    "RecurrenceSpec",
    "SchedulingEngine",
    "SchedulingError",
    "SchedulingPolicy",
    "ServiceKind",
    "TimeRange",
]
