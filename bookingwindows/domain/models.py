"""
Domain models for availability, conflict and recurrence calculations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Union

import pendulum
from pendulum import DateTime

from .exceptions import InvalidInputError

DISPLAY_DATE_FORMAT = "ddd D MMM"
CLOCK_FORMAT = "HH:mm"
DISPLAY_TIME_FORMAT = "h:mm A"

BookingId = Union[int, str]


def as_pendulum_date(value: date) -> pendulum.Date:
    """Normalise any ``datetime.date`` into a ``pendulum.Date``."""
    if isinstance(value, pendulum.Date):
        return value
    return pendulum.date(value.year, value.month, value.day)


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable half-open time range ``[start, end)``.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise InvalidInputError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in whole minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another. Touching ranges do not overlap."""
        return self.start < other.end and self.end > other.start

    def contains(self, other: "TimeRange") -> bool:
        """Check if ``other`` lies entirely inside this range."""
        return self.start <= other.start and other.end <= self.end

    def intersect(self, other: "TimeRange") -> "TimeRange | None":
        """
        Calculate the intersection of two time ranges.
        Returns None if there is no overlap.
        """
        if not self.overlaps(other):
            return None

        return TimeRange(start=max(self.start, other.start), end=min(self.end, other.end))

    def clip(self, bounds: "TimeRange") -> "TimeRange | None":
        """Clip this range to ``bounds``; None when it falls completely outside."""
        return self.intersect(bounds)

    def padded(self, minutes: int) -> "TimeRange":
        """Return a copy extended by ``minutes`` on both ends."""
        if not minutes:
            return self
        return TimeRange(
            start=self.start.subtract(minutes=minutes),
            end=self.end.add(minutes=minutes),
        )

    def clock_dict(self) -> Dict[str, str]:
        return {"start": self.start.format(CLOCK_FORMAT), "end": self.end.format(CLOCK_FORMAT)}

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('HH:mm')}"


class ServiceKind(str, Enum):
    """Service categories carried on busy events and bookings."""
    WALK = "walk"
    SITTING = "sitting"
    MEET_AND_GREET = "meet_and_greet"
    OTHER = "other"

    @property
    def is_walk_type(self) -> bool:
        """Short visits that can run while a carer is sitting elsewhere."""
        return self in (ServiceKind.WALK, ServiceKind.MEET_AND_GREET)

    @property
    def display_name(self) -> str:
        return {
            ServiceKind.WALK: "Walks",
            ServiceKind.SITTING: "Single-day sittings",
            ServiceKind.MEET_AND_GREET: "Meet and greets",
        }.get(self, "Services")

    @classmethod
    def from_label(cls, label: Optional[str]) -> "ServiceKind":
        """
        Classify a free-text calendar summary or service name.

        Examples:
            "Multi-Day Dog Sitting" -> SITTING
            "Meet & Greet - for new clients" -> MEET_AND_GREET
            "Solo Walk (1 hour)" -> WALK
        """
        if not label:
            return cls.OTHER

        lower = label.lower()
        if lower in {kind.value for kind in cls}:
            return cls(lower)
        if "sitting" in lower or "boarding" in lower:
            return cls.SITTING
        if "meet" in lower or "greet" in lower:
            return cls.MEET_AND_GREET
        if "walk" in lower or "solo" in lower or "quick" in lower:
            return cls.WALK
        return cls.OTHER


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


@dataclass(frozen=True)
class BusyEvent:
    """
    An occupied interval sourced from the external calendar feed.

    The engine only reads these; they are rebuilt for every call.
    """
    start: DateTime
    end: DateTime
    service_kind: ServiceKind = ServiceKind.OTHER
    event_id: Optional[str] = None
    summary: str = ""

    def __post_init__(self):
        # Validates start < end
        TimeRange(start=self.start, end=self.end)

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end)

    @property
    def duration_hours(self) -> float:
        return (self.end - self.start).total_seconds() / 3600


@dataclass(frozen=True)
class ExistingBooking:
    """Read model of a stored booking, used only for conflict checks."""
    id: BookingId
    start: DateTime
    end: DateTime
    service_kind: ServiceKind = ServiceKind.OTHER
    status: BookingStatus = BookingStatus.CONFIRMED

    def __post_init__(self):
        TimeRange(start=self.start, end=self.end)

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end)

    @property
    def is_confirmed(self) -> bool:
        return self.status is BookingStatus.CONFIRMED


@dataclass(frozen=True)
class BufferPolicy:
    """Travel/turnaround padding applied to both ends of every busy interval."""
    minutes: int = 15

    def __post_init__(self):
        if self.minutes < 0:
            raise InvalidInputError(f"Buffer must be non-negative, got {self.minutes} minutes")

    def pad(self, time_range: TimeRange) -> TimeRange:
        return time_range.padded(self.minutes)


@dataclass
class OperatingHours:
    """
    Bookable hours for a calendar day in the operating time zone.

    ``end_time=None`` runs the window to the last instant of the day.
    """
    start_time: time = time(0, 0)
    end_time: Optional[time] = None
    timezone: str = "Europe/London"

    def __post_init__(self):
        if self.end_time is not None and self.end_time <= self.start_time:
            raise InvalidInputError(
                f"Operating hours must open before they close, got {self.start_time}-{self.end_time}"
            )

    def day_start(self, day: date) -> DateTime:
        """Midnight at the start of ``day`` in the operating zone."""
        return pendulum.datetime(day.year, day.month, day.day, tz=self.timezone)

    def day_bounds(self, day: date) -> TimeRange:
        """The full calendar day ``[00:00, next 00:00)``."""
        start = self.day_start(day)
        return TimeRange(start=start, end=start.add(days=1))

    def window_for(self, day: date) -> TimeRange:
        """Get the operating window for a specific day."""
        start_of_day = self.day_start(day)
        start = start_of_day.set(hour=self.start_time.hour, minute=self.start_time.minute)

        if self.end_time is None:
            end = start_of_day.end_of("day")
        else:
            end = start_of_day.set(hour=self.end_time.hour, minute=self.end_time.minute)

        return TimeRange(start=start, end=end)

    def at(self, day: date, clock: time) -> DateTime:
        """Combine a date and a time of day in the operating zone."""
        return pendulum.datetime(
            day.year, day.month, day.day, clock.hour, clock.minute, tz=self.timezone
        )


# ---------------------------------------------------------------------------
# Availability results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConflictRecord:
    date: date
    reason: str

    def to_dict(self) -> Dict[str, str]:
        return {"date": self.date.isoformat(), "reason": self.reason}


@dataclass
class DayAvailability:
    """Free windows for one calendar day."""
    date: date
    windows: List[TimeRange] = field(default_factory=list)
    has_walks: bool = False
    message: str = ""

    @property
    def available(self) -> bool:
        return bool(self.windows)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "available": self.available,
            "windows": [window.clock_dict() for window in self.windows],
            "has_walks": self.has_walks,
            "message": self.message,
        }


@dataclass
class MultiDayAvailability:
    """All-or-nothing verdict for an inclusive date range."""
    start_date: date
    end_date: date
    conflicts: List[ConflictRecord] = field(default_factory=list)
    start_day_windows: Optional[List[TimeRange]] = None
    end_day_windows: Optional[List[TimeRange]] = None
    message: str = ""

    @property
    def available(self) -> bool:
        return not self.conflicts

    @property
    def total_days(self) -> int:
        return self.end_date.toordinal() - self.start_date.toordinal() + 1

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "available": self.available,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "total_days": self.total_days,
            "conflicts": [record.date.isoformat() for record in self.conflicts],
            "conflict_details": [record.to_dict() for record in self.conflicts],
            "message": self.message,
        }
        if self.start_day_windows is not None:
            data["start_day_windows"] = [w.clock_dict() for w in self.start_day_windows]
        if self.end_day_windows is not None:
            data["end_day_windows"] = [w.clock_dict() for w in self.end_day_windows]
        return data


@dataclass(frozen=True)
class InvalidRange:
    """Returned instead of a scan when the end date precedes the start date."""
    start_date: date
    end_date: date

    @property
    def available(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return f"End date {self.end_date.isoformat()} must not be before start date {self.start_date.isoformat()}"

    def to_dict(self) -> Dict[str, Any]:
        return {"available": False, "error": "invalid_range", "message": self.message}


@dataclass(frozen=True)
class TimeConflict:
    """A confirmed booking that blocks a candidate interval."""
    booking_id: BookingId
    time_range: TimeRange
    service_kind: ServiceKind = ServiceKind.OTHER

    @property
    def message(self) -> str:
        return f"Requested time overlaps booking {self.booking_id} ({self.time_range})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "booking_id": self.booking_id,
            "start": self.time_range.start.to_iso8601_string(),
            "end": self.time_range.end.to_iso8601_string(),
            "service_kind": self.service_kind.value,
            "message": self.message,
        }


@dataclass(frozen=True)
class WalkLimitStatus:
    has_active_sitting: bool = False
    walk_limit: Optional[int] = None  # None = unlimited
    current_walk_count: int = 0

    @property
    def limit_reached(self) -> bool:
        return self.walk_limit is not None and self.current_walk_count >= self.walk_limit


# ---------------------------------------------------------------------------
# Recurrence
# ---------------------------------------------------------------------------


class RecurrencePattern(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    CUSTOM = "custom"


@dataclass(frozen=True)
class RecurrenceSpec:
    """
    Abstract repeating schedule to expand into concrete dates.

    ``days_of_week`` uses ISO numbering (1=Monday, 7=Sunday) and is required
    for, and only for, the custom pattern.
    """
    pattern: RecurrencePattern
    preferred_time: time
    start_date: date
    horizon_weeks: int
    days_of_week: FrozenSet[int] = frozenset()

    def __post_init__(self):
        object.__setattr__(self, "pattern", RecurrencePattern(self.pattern))
        object.__setattr__(self, "days_of_week", frozenset(self.days_of_week))

        if self.horizon_weeks < 1:
            raise InvalidInputError(f"horizon_weeks must be at least 1, got {self.horizon_weeks}")

        invalid_days = sorted(day for day in self.days_of_week if day not in range(1, 8))
        if invalid_days:
            raise InvalidInputError(f"days_of_week must be between 1 and 7, got {invalid_days}")

        if self.pattern is RecurrencePattern.CUSTOM and not self.days_of_week:
            raise InvalidInputError("days_of_week is required for the custom pattern")
        if self.pattern is not RecurrencePattern.CUSTOM and self.days_of_week:
            raise InvalidInputError(f"days_of_week is only allowed for the custom pattern, not {self.pattern.value}")


@dataclass(frozen=True)
class CandidateDate:
    date: date
    time_range: TimeRange


@dataclass(frozen=True)
class AlternativeTime:
    start: DateTime

    @property
    def time(self) -> str:
        return self.start.format(CLOCK_FORMAT)

    @property
    def display_time(self) -> str:
        return self.start.format(DISPLAY_TIME_FORMAT)

    def to_dict(self) -> Dict[str, str]:
        return {"time": self.time, "display_time": self.display_time}


class BlockReason(str, Enum):
    FULLY_BOOKED = "fully_booked"
    INSUFFICIENT_WINDOW = "insufficient_window"
    CLOSED_DAY = "closed_day"
    WALK_LIMIT = "walk_limit"


@dataclass(frozen=True)
class ConfirmedDate:
    date: date
    time_range: TimeRange

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "display_date": as_pendulum_date(self.date).format(DISPLAY_DATE_FORMAT),
            "time": self.time_range.start.format(CLOCK_FORMAT),
            "status": "available",
        }


@dataclass(frozen=True)
class ConflictingDate:
    date: date
    requested: TimeRange
    reason: str
    alternatives: List[AlternativeTime] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "display_date": as_pendulum_date(self.date).format(DISPLAY_DATE_FORMAT),
            "requested_time": self.requested.start.format(CLOCK_FORMAT),
            "status": "conflict",
            "reason": self.reason,
            "alternatives": [alternative.to_dict() for alternative in self.alternatives],
        }


@dataclass(frozen=True)
class BlockedDate:
    date: date
    reason: BlockReason
    detail: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "display_date": as_pendulum_date(self.date).format(DISPLAY_DATE_FORMAT),
            "status": "blocked",
            "reason": self.reason.value,
            "detail": self.detail,
        }


@dataclass
class RecurrenceResult:
    confirmed: List[ConfirmedDate] = field(default_factory=list)
    conflicting: List[ConflictingDate] = field(default_factory=list)
    blocked: List[BlockedDate] = field(default_factory=list)

    @property
    def total_requested(self) -> int:
        return len(self.confirmed) + len(self.conflicting) + len(self.blocked)

    def summary(self) -> Dict[str, int]:
        return {
            "total_requested": self.total_requested,
            "available": len(self.confirmed),
            "conflicts": len(self.conflicting),
            "blocked": len(self.blocked),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary(),
            "available_dates": [item.to_dict() for item in self.confirmed],
            "conflicting_dates": [item.to_dict() for item in self.conflicting],
            "blocked_dates": [item.to_dict() for item in self.blocked],
        }
