"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability_service import AvailabilityService, BookingSourceProtocol, CalendarFeedProtocol

__all__ = ["AvailabilityService", "BookingSourceProtocol", "CalendarFeedProtocol"]
