"""
Conversion of calendar items and booking rows into domain models.

Calendar items use the common calendar API shape:

{
    "id": "abc123",
    "status": "confirmed",
    "summary": "Solo Walk (1 hour)",
    "description": "...",
    "start": {"dateTime": "2025-06-02T10:00:00+01:00"},
    "end": {"dateTime": "2025-06-02T11:00:00+01:00"}
}

All-day items carry ``{"date": "2025-06-02"}`` instead of ``dateTime`` and
cover whole days up to the exclusive end date.
"""

from typing import Any, Dict, Optional

import pendulum
from pendulum import DateTime

from ..domain.models import BookingStatus, BusyEvent, ExistingBooking, ServiceKind
from ..domain.parsing import parse_date, parse_datetime


def _parse_boundary(boundary: Dict[str, Any], timezone: str) -> DateTime:
    if boundary.get("dateTime"):
        return parse_datetime(boundary["dateTime"], timezone)
    if boundary.get("date"):
        day = parse_date(boundary["date"])
        return pendulum.datetime(day.year, day.month, day.day, tz=timezone)
    raise KeyError("dateTime")


def event_from_item(item: Dict[str, Any], timezone: str) -> Optional[BusyEvent]:
    """
    Build a BusyEvent from a calendar item.

    Returns None for cancelled or transparent (free) items.

    Raises:
        KeyError: If start or end is missing
        ValueError: If the times cannot be parsed or are inverted
    """
    if item.get("status") == "cancelled" or item.get("transparency") == "transparent":
        return None

    summary = item.get("summary") or ""
    label = item.get("serviceKind") or summary or item.get("description")

    return BusyEvent(
        start=_parse_boundary(item["start"], timezone),
        end=_parse_boundary(item["end"], timezone),
        service_kind=ServiceKind.from_label(label),
        event_id=item.get("id"),
        summary=summary,
    )


def booking_from_row(row: Dict[str, Any], timezone: str) -> ExistingBooking:
    """
    Build an ExistingBooking from a stored booking row.

    Raises:
        KeyError: If a required column is missing
        ValueError: If times or status cannot be parsed
    """
    return ExistingBooking(
        id=row["id"],
        start=parse_datetime(str(row["start_time"]), timezone),
        end=parse_datetime(str(row["end_time"]), timezone),
        service_kind=ServiceKind.from_label(row.get("service_type")),
        status=BookingStatus(str(row.get("status", "confirmed")).lower()),
    )
