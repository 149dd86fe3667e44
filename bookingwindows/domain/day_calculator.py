"""
Single-day availability: busy events in, free windows out.
"""

from datetime import date
from typing import Iterable, List, Optional

from .coexistence import CoexistencePolicy
from .intervals import buffer_and_merge, free_windows
from .models import BusyEvent, DayAvailability, ServiceKind, TimeRange, as_pendulum_date
from .policy import SchedulingPolicy


class DayAvailabilityCalculator:
    """
    Calculates free windows for one day in the operating zone.

    Algorithm:
    1. Build the operating window for the date
    2. Drop busy events that can coexist with the requested service
    3. Pad the remaining events with the travel buffer and merge them
    4. Invert the merged busy blocks inside the window
    """

    def __init__(self, policy: SchedulingPolicy, coexistence: Optional[CoexistencePolicy] = None):
        self.policy = policy
        self.coexistence = coexistence or CoexistencePolicy(policy)

    def blocking_events(
        self,
        busy_events: Iterable[BusyEvent],
        service_kind: Optional[ServiceKind],
    ) -> List[BusyEvent]:
        """Busy events that block ``service_kind``; all of them when no kind is given."""
        if service_kind is None:
            return list(busy_events)

        return [
            event for event in busy_events
            if not self.coexistence.coexists(event.service_kind, event.time_range, service_kind)
        ]

    def free_windows_for(
        self,
        day: date,
        busy_events: Iterable[BusyEvent],
        service_kind: Optional[ServiceKind] = None,
    ) -> List[TimeRange]:
        window = self.policy.hours.window_for(day)
        merged = buffer_and_merge(self.blocking_events(busy_events, service_kind), self.policy.buffer)
        return free_windows(window, merged)

    def check_single_day(
        self,
        day: date,
        busy_events: Iterable[BusyEvent],
        service_kind: Optional[ServiceKind] = None,
    ) -> DayAvailability:
        """
        Compute the free windows for ``day``.

        Args:
            day: Calendar date in the operating zone
            busy_events: Busy feed covering that day (events outside it are clipped away)
            service_kind: Service being booked; enables the coexistence filter

        Returns:
            DayAvailability with ordered, non-overlapping free windows
        """
        events = list(busy_events)
        label = as_pendulum_date(day).format("MMM D")
        has_walks = any(event.service_kind.is_walk_type for event in events)

        if self.policy.is_closed_for(day, service_kind):
            weekday = as_pendulum_date(day).format("dddd")
            if service_kind is ServiceKind.SITTING:
                message = (
                    f"Single-day sitting is not available on {weekday}s. "
                    "Please book a multi-day stay to cover this day."
                )
            else:
                message = f"Walk services are not available on {weekday}s"
            return DayAvailability(date=day, windows=[], has_walks=has_walks, message=message)

        windows = self.free_windows_for(day, events, service_kind)

        if not windows:
            message = f"No availability on {label} - fully booked"
        elif has_walks and service_kind is ServiceKind.SITTING:
            hours = self.policy.sitting_coexistence_hours
            message = f"Available (minimum {hours:g} hours required - walks scheduled)"
        else:
            message = f"{len(windows)} time slot(s) available on {label}"

        return DayAvailability(date=day, windows=windows, has_walks=has_walks, message=message)
