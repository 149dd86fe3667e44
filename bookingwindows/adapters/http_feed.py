"""
Calendar feed client for an HTTP calendar API.
"""

import logging
from typing import Any, Dict, List, Optional

import requests
from pendulum import DateTime

from ..domain.exceptions import CalendarFeedError
from ..domain.models import BusyEvent, ExistingBooking
from .events import booking_from_row, event_from_item

logger = logging.getLogger(__name__)


class HttpCalendarFeed:
    """
    Client for a calendar-style HTTP API.

    Uses ``GET {base_url}/events`` (calendar items, recurring events expanded)
    and ``GET {base_url}/bookings`` (booking rows).
    """

    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        timezone: str = "Europe/London",
        timeout: int = 30,
    ):
        """
        Initialize the client.

        Args:
            base_url: Root URL of the calendar API
            access_token: Optional bearer token
            timezone: IANA timezone identifier of the operating zone
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timezone = timezone
        self.timeout = timeout
        self.headers = {"Accept": "application/json"}
        if access_token:
            self.headers["Authorization"] = f"Bearer {access_token}"

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/{path}"

        try:
            response = requests.get(url, headers=self.headers, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise CalendarFeedError(f"Failed to fetch {url}: {e}") from e
        except ValueError as e:
            raise CalendarFeedError(f"Invalid JSON from {url}: {e}") from e

        if not isinstance(data, dict):
            raise CalendarFeedError(f"Unexpected response from {url}")

        return data

    def get_busy_events(self, start_time: DateTime, end_time: DateTime) -> List[BusyEvent]:
        """
        Get busy events between two instants.

        Raises:
            CalendarFeedError: If the API call fails
        """
        data = self._get(
            "events",
            {
                "timeMin": start_time.to_iso8601_string(),
                "timeMax": end_time.to_iso8601_string(),
                "singleEvents": "true",
                "orderBy": "startTime",
            },
        )

        events: List[BusyEvent] = []
        for item in data.get("items", []):
            try:
                event = event_from_item(item, self.timezone)
            except (KeyError, ValueError) as e:
                logger.warning("Could not parse calendar item %s: %s", item.get("id"), e)
                continue
            if event is not None:
                events.append(event)

        return events

    def get_bookings(self, start_time: DateTime, end_time: DateTime) -> List[ExistingBooking]:
        """
        Get confirmed bookings between two instants.

        Raises:
            CalendarFeedError: If the API call fails
        """
        data = self._get(
            "bookings",
            {
                "start": start_time.to_iso8601_string(),
                "end": end_time.to_iso8601_string(),
                "status": "confirmed",
            },
        )

        bookings: List[ExistingBooking] = []
        for row in data.get("bookings", []):
            try:
                booking = booking_from_row(row, self.timezone)
            except (KeyError, ValueError) as e:
                logger.warning("Could not parse booking row %s: %s", row.get("id"), e)
                continue
            if booking.is_confirmed:
                bookings.append(booking)

        return bookings
