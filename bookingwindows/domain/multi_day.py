"""
Multi-day conflict scanning for bookings that span a date range.
"""

from datetime import date
from typing import Iterable, List, Optional, Tuple, Union

from .coexistence import CoexistencePolicy
from .day_calculator import DayAvailabilityCalculator
from .models import (
    BusyEvent,
    ConflictRecord,
    InvalidRange,
    MultiDayAvailability,
    ServiceKind,
    TimeRange,
    as_pendulum_date,
)
from .policy import SchedulingPolicy


class MultiDayScanner:
    """
    Day-by-day, all-or-nothing availability check for an inclusive range.

    Interior days are only tested for conflicts; free windows are computed
    for the start and end days, where arrival and departure are arranged.
    """

    def __init__(
        self,
        policy: SchedulingPolicy,
        day_calculator: Optional[DayAvailabilityCalculator] = None,
        coexistence: Optional[CoexistencePolicy] = None,
    ):
        self.policy = policy
        self.coexistence = coexistence or CoexistencePolicy(policy)
        self.day_calculator = day_calculator or DayAvailabilityCalculator(policy, self.coexistence)

    def check_multi_day(
        self,
        start_date: date,
        end_date: date,
        busy_events: Iterable[BusyEvent],
        service_kind: ServiceKind = ServiceKind.SITTING,
    ) -> Union[MultiDayAvailability, InvalidRange]:
        """
        Scan every day in ``[start_date, end_date]`` for blocking busy events.

        Returns:
            InvalidRange when end_date precedes start_date, otherwise a
            MultiDayAvailability that is either fully available (with boundary
            day windows) or unavailable with the list of conflicting dates
        """
        if end_date < start_date:
            return InvalidRange(start_date=start_date, end_date=end_date)

        events = list(busy_events)
        blocking = self.day_calculator.blocking_events(events, service_kind)
        padded: List[Tuple[BusyEvent, TimeRange]] = [
            (event, self.policy.buffer.pad(event.time_range)) for event in blocking
        ]

        first = as_pendulum_date(start_date)
        last = as_pendulum_date(end_date)
        total_days = last.toordinal() - first.toordinal() + 1

        conflicts: List[ConflictRecord] = []
        for offset in range(total_days):
            day = first.add(days=offset)
            bounds = self.policy.hours.day_bounds(day)
            hits = [event for event, buffered in padded if buffered.overlaps(bounds)]
            if hits:
                conflicts.append(ConflictRecord(date=day, reason=self._conflict_reason(hits)))

        span = f"{first.format('MMM D')} - {last.format('MMM D')}"

        if conflicts:
            labels = ", ".join(as_pendulum_date(record.date).format("MMM D") for record in conflicts)
            if len(conflicts) < total_days:
                message = (
                    f"Unavailable for {span}. Conflicts on: {labels}. "
                    "Try different dates or book around these days."
                )
            else:
                message = f"No availability for the {total_days}-day period ({span})."
            return MultiDayAvailability(
                start_date=start_date,
                end_date=end_date,
                conflicts=conflicts,
                message=message,
            )

        # Weekday closures only refuse single-day bookings, so boundary days skip them
        start_day_windows = self.day_calculator.free_windows_for(first, events, service_kind)
        if last == first:
            end_day_windows = start_day_windows
        else:
            end_day_windows = self.day_calculator.free_windows_for(last, events, service_kind)

        return MultiDayAvailability(
            start_date=start_date,
            end_date=end_date,
            start_day_windows=start_day_windows,
            end_day_windows=end_day_windows,
            message=f"Available for all {total_days} days ({span})",
        )

    @staticmethod
    def _conflict_reason(events: List[BusyEvent]) -> str:
        if any(event.service_kind is ServiceKind.SITTING for event in events):
            return "Dog sitting conflict"
        return "Existing booking"
