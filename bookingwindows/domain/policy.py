"""
Scheduling policy shared by every engine component.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, FrozenSet, Optional

from .exceptions import InvalidInputError
from .models import BufferPolicy, OperatingHours, ServiceKind


@dataclass(frozen=True)
class SchedulingPolicy:
    """
    Immutable business rules for one engine instance.

    Built once from configuration and passed to every component; the engine
    itself keeps no other state between calls.
    """
    hours: OperatingHours = field(default_factory=OperatingHours)
    buffer: BufferPolicy = field(default_factory=BufferPolicy)
    sitting_coexistence_hours: float = 6
    walk_closed_weekdays: FrozenSet[int] = frozenset()  # ISO: 1=Monday, 7=Sunday
    sitting_closed_weekdays: FrozenSet[int] = frozenset()  # single-day sittings only
    max_horizon_weeks: int = 12
    alternative_step_minutes: int = 30
    max_alternatives: int = 5
    max_walks_during_sitting: Optional[int] = 4  # None = unlimited
    walk_limit_overrides: Dict[date, Optional[int]] = field(default_factory=dict)

    def __post_init__(self):
        if self.sitting_coexistence_hours <= 0:
            raise InvalidInputError("sitting_coexistence_hours must be positive")
        if self.max_horizon_weeks < 1:
            raise InvalidInputError("max_horizon_weeks must be at least 1")
        if self.alternative_step_minutes <= 0:
            raise InvalidInputError("alternative_step_minutes must be positive")
        if self.max_alternatives < 0:
            raise InvalidInputError("max_alternatives must not be negative")

    @property
    def timezone(self) -> str:
        return self.hours.timezone

    def is_closed_for(self, day: date, service_kind: Optional[ServiceKind]) -> bool:
        """
        Whether ``service_kind`` is refused on the weekday of ``day``.

        Sitting closures apply to single-day requests; multi-day stays may
        still cover those weekdays.
        """
        if service_kind is None:
            return False
        if service_kind.is_walk_type:
            return day.isoweekday() in self.walk_closed_weekdays
        if service_kind is ServiceKind.SITTING:
            return day.isoweekday() in self.sitting_closed_weekdays
        return False

    def walk_limit_for(self, day: date) -> Optional[int]:
        key = date(day.year, day.month, day.day)
        if key in self.walk_limit_overrides:
            return self.walk_limit_overrides[key]
        return self.max_walks_during_sitting
