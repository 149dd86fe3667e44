"""
Adapters layer - External calendar feeds.
"""

from .http_feed import HttpCalendarFeed
from .json_feed import JsonCalendarFeed

__all__ = ["HttpCalendarFeed", "JsonCalendarFeed"]
