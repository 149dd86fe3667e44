"""
Conflict and coexistence rules between bookings.

A long or multi-day dog sitting means a carer is at the client's home all
day, so short walk-type visits elsewhere can still be booked around it.
"""

from datetime import date
from typing import Iterable, Optional

from .models import (
    BookingId,
    ExistingBooking,
    ServiceKind,
    TimeConflict,
    TimeRange,
    WalkLimitStatus,
)
from .policy import SchedulingPolicy


class CoexistencePolicy:
    """
    Decides whether an existing booking blocks a candidate slot at all.

    Overlap is tested on the unbuffered bounds of the existing booking;
    travel buffers only apply to the day-availability display.
    """

    def __init__(self, policy: SchedulingPolicy):
        self.policy = policy

    def spans_multiple_days(self, time_range: TimeRange) -> bool:
        """True when the range covers more than one calendar day in the operating zone."""
        tz = self.policy.timezone
        first_day = time_range.start.in_timezone(tz).date()
        # An end at exactly midnight still belongs to the previous day
        last_day = time_range.end.in_timezone(tz).subtract(microseconds=1).date()
        return first_day != last_day

    def is_custodial(self, kind: ServiceKind, time_range: TimeRange) -> bool:
        """Sitting of at least the threshold length, or spanning several days."""
        if kind is not ServiceKind.SITTING:
            return False
        if self.spans_multiple_days(time_range):
            return True
        return time_range.duration_minutes() >= self.policy.sitting_coexistence_hours * 60

    def coexists(
        self,
        kind: ServiceKind,
        time_range: TimeRange,
        candidate_kind: Optional[ServiceKind] = None,
        candidate_range: Optional[TimeRange] = None,
    ) -> bool:
        """
        Check whether an existing booking/event can share time with a candidate.

        A custodial sitting candidate can run alongside walk-type visits; a
        short one cannot. Without ``candidate_range`` the sitting is assumed
        custodial, which is how the day display treats walks. Any other
        candidate (including an unspecified one) can run alongside a custodial
        sitting.
        """
        if candidate_kind is ServiceKind.SITTING:
            if candidate_range is not None and not self.is_custodial(ServiceKind.SITTING, candidate_range):
                return False
            return kind.is_walk_type
        return self.is_custodial(kind, time_range)

    def detect_conflict(
        self,
        candidate: TimeRange,
        existing_bookings: Iterable[ExistingBooking],
        exclude_id: Optional[BookingId] = None,
        candidate_kind: Optional[ServiceKind] = None,
    ) -> Optional[TimeConflict]:
        """
        Return the first confirmed booking that blocks ``candidate``, or None.

        Args:
            candidate: Requested interval
            existing_bookings: Stored bookings; only confirmed rows are considered
            exclude_id: Id of the booking being rescheduled (matched by identity)
            candidate_kind: Service kind of the candidate, if known

        Returns:
            TimeConflict for the earliest blocking booking, None when the slot is free
        """
        relevant = [
            booking for booking in existing_bookings
            if booking.is_confirmed and (exclude_id is None or booking.id != exclude_id)
        ]

        for booking in sorted(relevant, key=lambda b: (b.start, b.end)):
            booked = booking.time_range
            if not booked.overlaps(candidate):
                continue

            if self.coexists(booking.service_kind, booked, candidate_kind, candidate):
                continue

            return TimeConflict(
                booking_id=booking.id,
                time_range=booked,
                service_kind=booking.service_kind,
            )

        return None

    def walk_limit_status(
        self,
        day: date,
        existing_bookings: Iterable[ExistingBooking],
        exclude_id: Optional[BookingId] = None,
    ) -> WalkLimitStatus:
        """
        Count walks on ``day`` against the limit that applies during multi-day sittings.

        Without an active confirmed multi-day sitting covering the date, no
        limit applies.
        """
        tz = self.policy.timezone
        bookings = [
            booking for booking in existing_bookings
            if booking.is_confirmed and (exclude_id is None or booking.id != exclude_id)
        ]

        has_active_sitting = any(
            booking.service_kind is ServiceKind.SITTING
            and self.spans_multiple_days(booking.time_range)
            and booking.start.in_timezone(tz).date() <= day <= booking.end.in_timezone(tz).date()
            for booking in bookings
        )
        if not has_active_sitting:
            return WalkLimitStatus()

        walk_limit = self.policy.walk_limit_for(day)
        if walk_limit is None:
            return WalkLimitStatus(has_active_sitting=True)

        current_walk_count = sum(
            1 for booking in bookings
            if booking.service_kind is ServiceKind.WALK
            and booking.start.in_timezone(tz).date() == day
        )

        return WalkLimitStatus(
            has_active_sitting=True,
            walk_limit=walk_limit,
            current_walk_count=current_walk_count,
        )
