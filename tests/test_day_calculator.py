"""
Tests for single-day availability.
"""

from datetime import date, time

import pendulum

from bookingwindows.domain.day_calculator import DayAvailabilityCalculator
from bookingwindows.domain.models import BusyEvent, OperatingHours, ServiceKind, TimeRange
from bookingwindows.domain.policy import SchedulingPolicy

TZ = "Europe/London"


def _at(value: str):
    return pendulum.parse(value, tz=TZ)


def _event(start: str, end: str, kind=ServiceKind.OTHER) -> BusyEvent:
    return BusyEvent(start=_at(start), end=_at(end), service_kind=kind)


class TestDayAvailabilityCalculator:
    """Tests for DayAvailabilityCalculator."""

    def setup_method(self):
        self.calculator = DayAvailabilityCalculator(SchedulingPolicy())

    def test_free_day(self):
        result = self.calculator.check_single_day(date(2025, 6, 2), [])

        assert result.available
        assert len(result.windows) == 1
        assert result.windows[0].clock_dict() == {"start": "00:00", "end": "23:59"}
        assert result.message == "1 time slot(s) available on Jun 2"

    def test_single_event_with_buffer(self):
        """A 10:00-11:00 event leaves 00:00-09:45 and 11:15 until end of day."""
        result = self.calculator.check_single_day(
            date(2025, 6, 2), [_event("2025-06-02 10:00", "2025-06-02 11:00")]
        )

        assert [window.clock_dict() for window in result.windows] == [
            {"start": "00:00", "end": "09:45"},
            {"start": "11:15", "end": "23:59"},
        ]
        assert result.message == "2 time slot(s) available on Jun 2"

    def test_fully_booked(self):
        result = self.calculator.check_single_day(
            date(2025, 6, 2), [_event("2025-06-02 00:00", "2025-06-03 00:00")]
        )

        assert not result.available
        assert result.windows == []
        assert result.message == "No availability on Jun 2 - fully booked"

    def test_windows_never_cover_padded_events(self):
        events = [
            _event("2025-06-02 08:00", "2025-06-02 09:00"),
            _event("2025-06-02 13:00", "2025-06-02 14:30"),
            _event("2025-06-02 13:30", "2025-06-02 15:00"),
        ]
        result = self.calculator.check_single_day(date(2025, 6, 2), events)

        for window in result.windows:
            for event in events:
                assert not window.overlaps(event.time_range.padded(15))
        for previous, current in zip(result.windows, result.windows[1:]):
            assert previous.end < current.start

    def test_event_from_previous_evening(self):
        result = self.calculator.check_single_day(
            date(2025, 6, 2), [_event("2025-06-01 22:00", "2025-06-01 23:55")]
        )

        assert result.windows[0].start == _at("2025-06-02 00:10")

    def test_custom_operating_hours(self):
        policy = SchedulingPolicy(hours=OperatingHours(start_time=time(8, 0), end_time=time(18, 0), timezone=TZ))
        calculator = DayAvailabilityCalculator(policy)

        result = calculator.check_single_day(date(2025, 6, 2), [_event("2025-06-02 07:00", "2025-06-02 08:30")])

        assert result.windows == [TimeRange(start=_at("2025-06-02 08:45"), end=_at("2025-06-02 18:00"))]

    def test_sitting_request_ignores_walks(self):
        events = [_event("2025-06-02 12:00", "2025-06-02 13:00", ServiceKind.WALK)]

        result = self.calculator.check_single_day(date(2025, 6, 2), events, ServiceKind.SITTING)

        assert len(result.windows) == 1
        assert result.has_walks
        assert result.message == "Available (minimum 6 hours required - walks scheduled)"

    def test_walk_request_ignores_custodial_sitting(self):
        events = [_event("2025-06-02 09:00", "2025-06-02 17:00", ServiceKind.SITTING)]

        walk = self.calculator.check_single_day(date(2025, 6, 2), events, ServiceKind.WALK)
        unspecified = self.calculator.check_single_day(date(2025, 6, 2), events)

        assert len(walk.windows) == 1
        assert len(unspecified.windows) == 2

    def test_walks_closed_on_weekend(self):
        calculator = DayAvailabilityCalculator(SchedulingPolicy(walk_closed_weekdays=frozenset({6, 7})))
        saturday = date(2025, 6, 7)

        walk = calculator.check_single_day(saturday, [], ServiceKind.WALK)
        sitting = calculator.check_single_day(saturday, [], ServiceKind.SITTING)

        assert not walk.available
        assert walk.message == "Walk services are not available on Saturdays"
        assert sitting.available

    def test_to_dict(self):
        result = self.calculator.check_single_day(
            date(2025, 6, 2), [_event("2025-06-02 10:00", "2025-06-02 11:00", ServiceKind.WALK)]
        )

        data = result.to_dict()

        assert data["date"] == "2025-06-02"
        assert data["available"] is True
        assert data["has_walks"] is True
        assert data["windows"][0] == {"start": "00:00", "end": "09:45"}

    def test_single_day_sitting_closed_on_weekend(self):
        calculator = DayAvailabilityCalculator(SchedulingPolicy(sitting_closed_weekdays=frozenset({6, 7})))

        saturday = calculator.check_single_day(date(2025, 6, 7), [], ServiceKind.SITTING)
        friday = calculator.check_single_day(date(2025, 6, 6), [], ServiceKind.SITTING)
        walk = calculator.check_single_day(date(2025, 6, 7), [], ServiceKind.WALK)

        assert not saturday.available
        assert saturday.message.startswith("Single-day sitting is not available on Saturdays")
        assert friday.available
        assert walk.available
