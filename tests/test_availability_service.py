"""
Tests for AvailabilityService with stubbed feeds.
"""

from datetime import date, time
from typing import List

import pendulum
from pendulum import DateTime

from bookingwindows.domain.engine import SchedulingEngine
from bookingwindows.domain.models import (
    BookingStatus,
    BusyEvent,
    ExistingBooking,
    InvalidRange,
    RecurrenceSpec,
    ServiceKind,
    TimeRange,
)
from bookingwindows.services.availability_service import AvailabilityService

TZ = "Europe/London"


def _at(value: str):
    return pendulum.parse(value, tz=TZ)


class StubCalendarFeed:
    """Calendar feed returning a fixed event list and recording the queried spans."""

    def __init__(self, events: List[BusyEvent]):
        self.events = events
        self.calls = []

    def get_busy_events(self, start_time: DateTime, end_time: DateTime) -> List[BusyEvent]:
        self.calls.append((start_time, end_time))
        return [event for event in self.events if event.start < end_time and event.end > start_time]


class StubBookingSource:
    def __init__(self, bookings: List[ExistingBooking]):
        self.bookings = bookings
        self.calls = []

    def get_bookings(self, start_time: DateTime, end_time: DateTime) -> List[ExistingBooking]:
        self.calls.append((start_time, end_time))
        return list(self.bookings)


class TestAvailabilityService:
    """Tests for AvailabilityService."""

    def _service(self, events=(), bookings=None):
        feed = StubCalendarFeed(list(events))
        source = StubBookingSource(bookings) if bookings is not None else None
        return AvailabilityService(calendar_feed=feed, engine=SchedulingEngine(), booking_source=source), feed, source

    def test_feed_query_is_widened_by_buffer(self):
        service, feed, _ = self._service()

        service.single_day(date(2025, 6, 2))

        assert feed.calls == [(_at("2025-06-01 23:45"), _at("2025-06-03 00:15"))]

    def test_single_day(self):
        events = [BusyEvent(start=_at("2025-06-02 10:00"), end=_at("2025-06-02 11:00"), event_id="evt-1")]
        service, _, _ = self._service(events)

        result = service.single_day(date(2025, 6, 2))

        assert len(result.windows) == 2

    def test_single_day_excludes_rescheduled_event(self):
        events = [BusyEvent(start=_at("2025-06-02 10:00"), end=_at("2025-06-02 11:00"), event_id="evt-1")]
        service, _, _ = self._service(events)

        result = service.single_day(date(2025, 6, 2), exclude_event_id="evt-1")

        assert len(result.windows) == 1

    def test_multi_day_invalid_range_skips_feed(self):
        service, feed, _ = self._service()

        result = service.multi_day(date(2025, 6, 3), date(2025, 6, 1))

        assert isinstance(result, InvalidRange)
        assert feed.calls == []

    def test_multi_day(self):
        events = [BusyEvent(start=_at("2025-06-02 10:00"), end=_at("2025-06-02 11:00"))]
        service, _, _ = self._service(events)

        result = service.multi_day(date(2025, 6, 1), date(2025, 6, 3))

        assert [record.date.isoformat() for record in result.conflicts] == ["2025-06-02"]

    def test_check_booking_without_booking_source(self):
        service, _, _ = self._service()

        assert service.check_booking(TimeRange(start=_at("2025-06-02 10:00"), end=_at("2025-06-02 11:00"))) is None

    def test_check_booking_conflict(self):
        bookings = [
            ExistingBooking(
                id=9,
                start=_at("2025-06-02 10:00"),
                end=_at("2025-06-02 11:00"),
                service_kind=ServiceKind.WALK,
                status=BookingStatus.CONFIRMED,
            )
        ]
        service, _, source = self._service(bookings=bookings)
        candidate = TimeRange(start=_at("2025-06-02 10:30"), end=_at("2025-06-02 11:30"))

        conflict = service.check_booking(candidate, ServiceKind.WALK)

        assert conflict.booking_id == 9
        assert service.check_booking(candidate, ServiceKind.WALK, exclude_booking_id=9) is None
        assert source.calls[0] == (candidate.start, candidate.end)

    def test_group_by_date_lists_every_date(self):
        events = [
            BusyEvent(start=_at("2025-06-02 10:00"), end=_at("2025-06-02 11:00")),
            BusyEvent(start=_at("2025-06-08 23:50"), end=_at("2025-06-08 23:55")),
        ]
        service, _, _ = self._service()

        grouped = service.group_by_date([date(2025, 6, 2), date(2025, 6, 9), date(2025, 6, 16)], events)

        assert len(grouped[date(2025, 6, 2)]) == 1
        # The buffer reaches past midnight into the 9th
        assert len(grouped[date(2025, 6, 9)]) == 1
        assert grouped[date(2025, 6, 16)] == []

    def test_recurring_end_to_end(self):
        events = [BusyEvent(start=_at("2025-06-09 09:00"), end=_at("2025-06-09 10:00"))]
        service, feed, source = self._service(events, bookings=[])
        spec = RecurrenceSpec(
            pattern="weekly", preferred_time=time(9, 0), start_date=date(2025, 6, 2), horizon_weeks=3
        )

        result = service.recurring(spec, 60)

        assert [item.date.isoformat() for item in result.confirmed] == ["2025-06-02", "2025-06-16"]
        assert [item.date.isoformat() for item in result.conflicting] == ["2025-06-09"]
        assert len(feed.calls) == 1
        assert source.calls == [(_at("2025-06-02 00:00"), _at("2025-06-17 00:00"))]
