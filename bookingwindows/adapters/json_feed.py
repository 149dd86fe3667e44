"""
Calendar feed backed by a local JSON export.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from pendulum import DateTime

from ..domain.exceptions import CalendarFeedError
from ..domain.models import BusyEvent, ExistingBooking
from .events import booking_from_row, event_from_item

logger = logging.getLogger(__name__)


class JsonCalendarFeed:
    """
    Reads busy events and bookings from a JSON file.

    Expected layout::

        {"events": [<calendar items>], "bookings": [<booking rows>]}

    Useful for offline checks and tests without calendar API access.
    """

    def __init__(self, data_file: Path, timezone: str = "Europe/London"):
        self.data_file = Path(data_file)
        self.timezone = timezone
        self._data = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.data_file.exists():
            raise CalendarFeedError(f"Feed file not found: {self.data_file}")

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise CalendarFeedError(f"Invalid JSON in {self.data_file}: {exc}") from exc

        if not isinstance(data, dict):
            raise CalendarFeedError("Feed file must contain an object at the root level.")

        return data

    def get_busy_events(self, start_time: DateTime, end_time: DateTime) -> List[BusyEvent]:
        """Return events overlapping ``[start_time, end_time)``."""
        events: List[BusyEvent] = []

        for item in self._data.get("events", []):
            try:
                event = event_from_item(item, self.timezone)
            except (KeyError, ValueError) as exc:
                logger.warning("Skipping calendar item %s: %s", item.get("id"), exc)
                continue

            if event is not None and event.start < end_time and event.end > start_time:
                events.append(event)

        return events

    def get_bookings(self, start_time: DateTime, end_time: DateTime) -> List[ExistingBooking]:
        """Return confirmed bookings overlapping ``[start_time, end_time)``."""
        bookings: List[ExistingBooking] = []

        for row in self._data.get("bookings", []):
            try:
                booking = booking_from_row(row, self.timezone)
            except (KeyError, ValueError) as exc:
                logger.warning("Skipping booking row %s: %s", row.get("id"), exc)
                continue

            if booking.is_confirmed and booking.start < end_time and booking.end > start_time:
                bookings.append(booking)

        return bookings
