"""
Expansion of recurring booking requests into classified concrete dates.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Mapping, Optional, Sequence

import pendulum

from .coexistence import CoexistencePolicy
from .day_calculator import DayAvailabilityCalculator
from .exceptions import InvalidInputError
from .models import (
    AlternativeTime,
    BlockedDate,
    BlockReason,
    BookingId,
    BusyEvent,
    CandidateDate,
    ConfirmedDate,
    ConflictingDate,
    ExistingBooking,
    RecurrencePattern,
    RecurrenceResult,
    RecurrenceSpec,
    ServiceKind,
    TimeRange,
    as_pendulum_date,
)
from .policy import SchedulingPolicy

logger = logging.getLogger(__name__)


def _plain(day: date) -> date:
    return date(day.year, day.month, day.day)


class RecurrenceExpander:
    """
    Turns a RecurrenceSpec into confirmed, conflicting and blocked dates.

    The expander only advises: reserving the confirmed dates is a separate
    write operation owned by the caller.
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

    def target_dates(self, spec: RecurrenceSpec) -> List[pendulum.Date]:
        """Enumerate the dates a recurrence pattern asks for within its horizon."""
        weeks = min(spec.horizon_weeks, self.policy.max_horizon_weeks)
        if weeks < spec.horizon_weeks:
            logger.debug("Clamping recurrence horizon from %s to %s weeks", spec.horizon_weeks, weeks)

        start = as_pendulum_date(spec.start_date)
        horizon_days = weeks * 7

        if spec.pattern is RecurrencePattern.WEEKLY:
            return [start.add(days=offset) for offset in range(0, horizon_days, 7)]

        if spec.pattern is RecurrencePattern.BIWEEKLY:
            return [start.add(days=offset) for offset in range(0, horizon_days, 14)]

        return [
            day for day in (start.add(days=offset) for offset in range(horizon_days))
            if day.isoweekday() in spec.days_of_week
        ]

    def candidates(self, spec: RecurrenceSpec, duration_minutes: int) -> List[CandidateDate]:
        """Pair every target date with its requested interval."""
        if duration_minutes <= 0:
            raise InvalidInputError(f"duration_minutes must be positive, got {duration_minutes}")

        candidates: List[CandidateDate] = []
        for day in self.target_dates(spec):
            start = self.policy.hours.at(day, spec.preferred_time)
            candidates.append(
                CandidateDate(date=day, time_range=TimeRange(start=start, end=start.add(minutes=duration_minutes)))
            )
        return candidates

    def expand_recurrence(
        self,
        spec: RecurrenceSpec,
        duration_minutes: int,
        busy_events_per_date: Mapping[date, Sequence[BusyEvent]],
        existing_bookings: Iterable[ExistingBooking] = (),
        service_kind: ServiceKind = ServiceKind.WALK,
        exclude_booking_id: Optional[BookingId] = None,
    ) -> RecurrenceResult:
        """
        Classify every occurrence of ``spec``.

        Args:
            spec: Recurrence pattern, preferred time and horizon
            duration_minutes: Length of each occurrence
            busy_events_per_date: Busy feed keyed by date; missing dates are free
            existing_bookings: Stored bookings checked with the coexistence policy
            service_kind: Service being booked
            exclude_booking_id: Booking being rescheduled, ignored in checks

        Returns:
            RecurrenceResult partitioned into confirmed, conflicting and blocked
        """
        bookings = list(existing_bookings)
        feed = {_plain(day): list(events) for day, events in busy_events_per_date.items()}
        result = RecurrenceResult()

        for candidate in self.candidates(spec, duration_minutes):
            day = candidate.date

            if self.policy.is_closed_for(day, service_kind):
                result.blocked.append(BlockedDate(
                    date=day,
                    reason=BlockReason.CLOSED_DAY,
                    detail=f"{service_kind.display_name} not available on this weekday",
                ))
                continue

            if service_kind is ServiceKind.WALK and bookings:
                limit = self.coexistence.walk_limit_status(day, bookings, exclude_booking_id)
                if limit.limit_reached:
                    result.blocked.append(BlockedDate(
                        date=day,
                        reason=BlockReason.WALK_LIMIT,
                        detail=(
                            f"Walk limit reached ({limit.current_walk_count}/{limit.walk_limit} "
                            "during active sitting)"
                        ),
                    ))
                    continue

            windows = self.day_calculator.free_windows_for(
                day, feed.get(_plain(day), []), service_kind
            )
            usable = [window for window in windows if window.duration_minutes() >= duration_minutes]

            fits_window = any(window.contains(candidate.time_range) for window in usable)
            conflict = self.coexistence.detect_conflict(
                candidate.time_range, bookings, exclude_booking_id, service_kind
            )

            if fits_window and conflict is None:
                result.confirmed.append(ConfirmedDate(date=day, time_range=candidate.time_range))
                continue

            alternatives = self.find_alternatives(
                usable,
                duration_minutes,
                candidate.time_range.start,
                bookings,
                exclude_booking_id,
                service_kind,
            )

            if alternatives:
                reason = conflict.message if fits_window and conflict else "Requested time not available"
                result.conflicting.append(ConflictingDate(
                    date=day,
                    requested=candidate.time_range,
                    reason=reason,
                    alternatives=alternatives,
                ))
            elif not windows:
                result.blocked.append(BlockedDate(
                    date=day,
                    reason=BlockReason.FULLY_BOOKED,
                    detail="Fully booked on this date",
                ))
            elif not usable:
                result.blocked.append(BlockedDate(
                    date=day,
                    reason=BlockReason.INSUFFICIENT_WINDOW,
                    detail=f"No free window of {duration_minutes} minutes on this date",
                ))
            else:
                # Long enough windows exist but every slot clashes with a confirmed booking
                result.blocked.append(BlockedDate(
                    date=day,
                    reason=BlockReason.FULLY_BOOKED,
                    detail="Every free slot clashes with a confirmed booking",
                ))

            logger.debug("Recurrence date %s not confirmed (%d alternatives)", day, len(alternatives))

        return result

    def find_alternatives(
        self,
        usable_windows: Sequence[TimeRange],
        duration_minutes: int,
        preferred_start: pendulum.DateTime,
        existing_bookings: Sequence[ExistingBooking] = (),
        exclude_booking_id: Optional[BookingId] = None,
        service_kind: Optional[ServiceKind] = None,
    ) -> List[AlternativeTime]:
        """
        Suggest start times on the same day, nearest to the preferred start first.

        Starts are generated in fixed steps from the beginning of each usable
        window; ties in distance go to the earlier start.
        """
        step = self.policy.alternative_step_minutes
        options: List[AlternativeTime] = []

        for window in usable_windows:
            current = window.start
            while current.add(minutes=duration_minutes) <= window.end:
                slot = TimeRange(start=current, end=current.add(minutes=duration_minutes))
                blocked = self.coexistence.detect_conflict(
                    slot, existing_bookings, exclude_booking_id, service_kind
                )
                if blocked is None:
                    options.append(AlternativeTime(start=current))
                current = current.add(minutes=step)

        options.sort(key=lambda option: (abs((option.start - preferred_start).total_seconds()), option.start))
        return options[: self.policy.max_alternatives]
