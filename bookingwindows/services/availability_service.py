"""
Application services for availability queries.

The service coordinates fetching busy events and bookings via feed adapters
and delegates the actual availability calculation to the domain-level
``SchedulingEngine``. This keeps the CLI thin and allows the calendar
dependency to be stubbed via a simple protocol.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Optional, Protocol, Sequence, Union

from pendulum import DateTime

from ..domain.engine import SchedulingEngine
from ..domain.models import (
    BookingId,
    BusyEvent,
    DayAvailability,
    ExistingBooking,
    InvalidRange,
    MultiDayAvailability,
    RecurrenceResult,
    RecurrenceSpec,
    ServiceKind,
    TimeConflict,
    TimeRange,
    as_pendulum_date,
)

logger = logging.getLogger(__name__)


class CalendarFeedProtocol(Protocol):
    """Protocol describing the busy-event source needed by the service."""

    def get_busy_events(self, start_time: DateTime, end_time: DateTime) -> List[BusyEvent]:
        """Return busy events overlapping the window."""


class BookingSourceProtocol(Protocol):
    """Protocol describing the read-only booking store."""

    def get_bookings(self, start_time: DateTime, end_time: DateTime) -> List[ExistingBooking]:
        """Return confirmed bookings overlapping the window."""


class AvailabilityService:
    """
    Orchestrates feed retrieval and engine calls.

    Results are advisory: a slot reported free here may be taken before the
    caller commits it, so the write path must still handle conflicts.
    """

    def __init__(
        self,
        calendar_feed: CalendarFeedProtocol,
        engine: SchedulingEngine,
        booking_source: Optional[BookingSourceProtocol] = None,
    ) -> None:
        self._calendar_feed = calendar_feed
        self._engine = engine
        self._booking_source = booking_source

    @property
    def engine(self) -> SchedulingEngine:
        return self._engine

    def single_day(
        self,
        day: date,
        service_kind: Optional[ServiceKind] = None,
        exclude_event_id: Optional[str] = None,
    ) -> DayAvailability:
        """
        Free windows for one day.

        ``exclude_event_id`` drops the calendar event of a booking that is
        being rescheduled.
        """
        events = self.fetch_busy_events(day, day)
        if exclude_event_id:
            events = [event for event in events if event.event_id != exclude_event_id]
        return self._engine.check_single_day(day, events, service_kind)

    def multi_day(
        self,
        start_date: date,
        end_date: date,
        service_kind: ServiceKind = ServiceKind.SITTING,
    ) -> Union[MultiDayAvailability, InvalidRange]:
        """All-or-nothing availability across an inclusive date range."""
        if end_date < start_date:
            return InvalidRange(start_date=start_date, end_date=end_date)

        events = self.fetch_busy_events(start_date, end_date)
        return self._engine.check_multi_day(start_date, end_date, events, service_kind)

    def check_booking(
        self,
        candidate: TimeRange,
        candidate_kind: Optional[ServiceKind] = None,
        exclude_booking_id: Optional[BookingId] = None,
    ) -> Optional[TimeConflict]:
        """Check a candidate interval against stored confirmed bookings."""
        bookings = self.fetch_bookings(candidate.start, candidate.end)
        return self._engine.detect_conflict(candidate, bookings, exclude_booking_id, candidate_kind)

    def recurring(
        self,
        spec: RecurrenceSpec,
        duration_minutes: int,
        service_kind: ServiceKind = ServiceKind.WALK,
        exclude_booking_id: Optional[BookingId] = None,
    ) -> RecurrenceResult:
        """Classify every occurrence of a recurring request."""
        dates = self._engine.recurrence_expander.target_dates(spec)
        if not dates:
            return RecurrenceResult()

        events = self.fetch_busy_events(dates[0], dates[-1])
        per_date = self.group_by_date(dates, events)

        hours = self._engine.policy.hours
        bookings = self.fetch_bookings(
            hours.day_bounds(dates[0]).start,
            hours.day_bounds(dates[-1]).end,
        )

        return self._engine.expand_recurrence(
            spec,
            duration_minutes,
            per_date,
            existing_bookings=bookings,
            service_kind=service_kind,
            exclude_booking_id=exclude_booking_id,
        )

    def fetch_busy_events(self, start_date: date, end_date: date) -> List[BusyEvent]:
        """
        Fetch busy events for a date range.

        The query span is widened by the buffer so events just outside the
        range whose padding reaches into it are included.
        """
        span = self._padded_span(start_date, end_date)
        events = self._calendar_feed.get_busy_events(span.start, span.end)
        logger.debug("Fetched %d busy events for %s..%s", len(events), start_date, end_date)
        return events

    def fetch_bookings(self, start_time: DateTime, end_time: DateTime) -> List[ExistingBooking]:
        if self._booking_source is None:
            return []
        return self._booking_source.get_bookings(start_time, end_time)

    def group_by_date(
        self,
        dates: Sequence[date],
        events: Sequence[BusyEvent],
    ) -> Dict[date, List[BusyEvent]]:
        """
        Map every requested date to the events whose padded range touches it.

        Dates without events map to an explicit empty list for deterministic
        downstream behaviour.
        """
        grouped: Dict[date, List[BusyEvent]] = {}
        buffer = self._engine.policy.buffer

        for day in dates:
            bounds = self._engine.policy.hours.day_bounds(day)
            grouped[day] = [
                event for event in events
                if buffer.pad(event.time_range).overlaps(bounds)
            ]

        return grouped

    def _padded_span(self, start_date: date, end_date: date) -> TimeRange:
        hours = self._engine.policy.hours
        span = TimeRange(
            start=hours.day_bounds(as_pendulum_date(start_date)).start,
            end=hours.day_bounds(as_pendulum_date(end_date)).end,
        )
        return self._engine.policy.buffer.pad(span)
