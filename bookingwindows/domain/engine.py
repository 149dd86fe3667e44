"""
Facade exposing the four engine operations behind one policy.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

from datetime import date
from typing import Iterable, Mapping, Optional, Sequence, Union

from .coexistence import CoexistencePolicy
from .day_calculator import DayAvailabilityCalculator
from .models import (
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
    WalkLimitStatus,
)
from .multi_day import MultiDayScanner
from .policy import SchedulingPolicy
from .recurrence import RecurrenceExpander


class SchedulingEngine:
    """
    Stateless entry point for availability, conflict and recurrence queries.

    Every method is a pure function of its arguments and the policy.
    """

    def __init__(self, policy: Optional[SchedulingPolicy] = None):
        self.policy = policy or SchedulingPolicy()
        self.coexistence = CoexistencePolicy(self.policy)
        self.day_calculator = DayAvailabilityCalculator(self.policy, self.coexistence)
        self.multi_day_scanner = MultiDayScanner(self.policy, self.day_calculator, self.coexistence)
        self.recurrence_expander = RecurrenceExpander(self.policy, self.day_calculator, self.coexistence)

    def check_single_day(
        self,
        day: date,
        busy_events: Iterable[BusyEvent],
        service_kind: Optional[ServiceKind] = None,
    ) -> DayAvailability:
        return self.day_calculator.check_single_day(day, busy_events, service_kind)

    def check_multi_day(
        self,
        start_date: date,
        end_date: date,
        busy_events: Iterable[BusyEvent],
        service_kind: ServiceKind = ServiceKind.SITTING,
    ) -> Union[MultiDayAvailability, InvalidRange]:
        return self.multi_day_scanner.check_multi_day(start_date, end_date, busy_events, service_kind)

    def detect_conflict(
        self,
        candidate: TimeRange,
        existing_bookings: Iterable[ExistingBooking],
        exclude_id: Optional[BookingId] = None,
        candidate_kind: Optional[ServiceKind] = None,
    ) -> Optional[TimeConflict]:
        return self.coexistence.detect_conflict(candidate, existing_bookings, exclude_id, candidate_kind)

    def expand_recurrence(
        self,
        spec: RecurrenceSpec,
        duration_minutes: int,
        busy_events_per_date: Mapping[date, Sequence[BusyEvent]],
        existing_bookings: Iterable[ExistingBooking] = (),
        service_kind: ServiceKind = ServiceKind.WALK,
        exclude_booking_id: Optional[BookingId] = None,
    ) -> RecurrenceResult:
        return self.recurrence_expander.expand_recurrence(
            spec,
            duration_minutes,
            busy_events_per_date,
            existing_bookings=existing_bookings,
            service_kind=service_kind,
            exclude_booking_id=exclude_booking_id,
        )

    def walk_limit_status(
        self,
        day: date,
        existing_bookings: Iterable[ExistingBooking],
        exclude_id: Optional[BookingId] = None,
    ) -> WalkLimitStatus:
        return self.coexistence.walk_limit_status(day, existing_bookings, exclude_id)
