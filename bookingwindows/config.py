"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import date, time
from pathlib import Path
from typing import Dict, List, Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import BufferPolicy, OperatingHours
from .domain.parsing import parse_time_of_day
from .domain.policy import SchedulingPolicy


class BufferConfig(BaseModel):
    """Travel buffer around busy events."""
    minutes: int = 15
    extended_minutes: int = 30  # clients outside the usual catchment area

    @field_validator("minutes", "extended_minutes")
    @classmethod
    def validate_minutes(cls, value: int) -> int:
        """Ensure buffers are not negative."""
        if value < 0:
            raise ValueError(f"Buffer minutes must not be negative, got {value}")
        return value


class HoursConfig(BaseModel):
    """Operating window for every day. ``end: null`` means until midnight."""
    start: str = "00:00"
    end: Optional[str] = None

    @field_validator("start", "end")
    @classmethod
    def validate_clock(cls, value: Optional[str]) -> Optional[str]:
        """Validate HH:mm clock strings."""
        if value is not None:
            parse_time_of_day(value)
        return value

    @model_validator(mode="after")
    def validate_hours_order(self) -> "HoursConfig":
        """Ensure the configured window opens before it closes."""
        if self.end is not None and self.get_end_time() <= self.get_start_time():
            raise ValueError("hours.end must be later than hours.start")
        return self

    def get_start_time(self) -> time:
        return parse_time_of_day(self.start)

    def get_end_time(self) -> Optional[time]:
        return parse_time_of_day(self.end) if self.end is not None else None


class CoexistenceConfig(BaseModel):
    sitting_min_hours: float = Field(default=6, gt=0)


class RecurrenceConfig(BaseModel):
    max_weeks_ahead: int = Field(default=12, ge=1)
    alternative_step_minutes: int = Field(default=30, gt=0)
    max_alternatives: int = Field(default=5, ge=0)


class WalkLimitConfig(BaseModel):
    """Walk cap while a multi-day sitting is running. ``null`` means unlimited."""
    max_walks_during_sitting: Optional[int] = Field(default=4, ge=0)
    overrides: Dict[date, Optional[int]] = Field(default_factory=dict)


class FeedConfig(BaseModel):
    """Where busy events and bookings come from: a JSON file or an HTTP endpoint."""
    path: Optional[Path] = None
    url: Optional[str] = None
    token: Optional[str] = None
    timeout_seconds: int = Field(default=30, gt=0)

    @model_validator(mode="after")
    def validate_single_source(self) -> "FeedConfig":
        if self.path is not None and self.url is not None:
            raise ValueError("Configure either feed.path or feed.url, not both")
        return self


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/London"
    buffer: BufferConfig = Field(default_factory=BufferConfig)
    hours: HoursConfig = Field(default_factory=HoursConfig)
    coexistence: CoexistenceConfig = Field(default_factory=CoexistenceConfig)
    recurrence: RecurrenceConfig = Field(default_factory=RecurrenceConfig)
    walk_limit: WalkLimitConfig = Field(default_factory=WalkLimitConfig)
    walk_closed_weekdays: List[int] = Field(default_factory=lambda: [6, 7])  # Saturday, Sunday
    sitting_closed_weekdays: List[int] = Field(default_factory=lambda: [6, 7])  # single-day sittings
    feed: FeedConfig = Field(default_factory=FeedConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Only IANA zone names are accepted."""
        try:
            pendulum.timezone(value)
        except (ValueError, KeyError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("walk_closed_weekdays", "sitting_closed_weekdays")
    @classmethod
    def validate_closed_weekdays(cls, value: List[int]) -> List[int]:
        """Ensure ISO weekdays are in valid range and deduplicated."""
        invalid_days = [day for day in value if day not in range(1, 8)]
        if invalid_days:
            raise ValueError(f"Closed weekdays must be between 1 and 7, got {invalid_days}")
        # Preserve order while removing duplicates
        seen: set[int] = set()
        deduped: List[int] = []
        for day in value:
            if day not in seen:
                deduped.append(day)
                seen.add(day)
        return deduped

    def to_policy(self, extended_travel: bool = False) -> SchedulingPolicy:
        """
        Build the domain policy.

        Args:
            extended_travel: Use the extended buffer for clients further away

        Returns:
            SchedulingPolicy for a SchedulingEngine
        """
        buffer_minutes = self.buffer.extended_minutes if extended_travel else self.buffer.minutes

        return SchedulingPolicy(
            hours=OperatingHours(
                start_time=self.hours.get_start_time(),
                end_time=self.hours.get_end_time(),
                timezone=self.timezone,
            ),
            buffer=BufferPolicy(minutes=buffer_minutes),
            sitting_coexistence_hours=self.coexistence.sitting_min_hours,
            walk_closed_weekdays=frozenset(self.walk_closed_weekdays),
            sitting_closed_weekdays=frozenset(self.sitting_closed_weekdays),
            max_horizon_weeks=self.recurrence.max_weeks_ahead,
            alternative_step_minutes=self.recurrence.alternative_step_minutes,
            max_alternatives=self.recurrence.max_alternatives,
            max_walks_during_sitting=self.walk_limit.max_walks_during_sitting,
            walk_limit_overrides=dict(self.walk_limit.overrides),
        )

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)

        # Relative feed paths are resolved against the config file
        if config.feed.path is not None and not config.feed.path.is_absolute():
            config.feed.path = (config_path.parent / config.feed.path).resolve()

        return config


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
