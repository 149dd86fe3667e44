"""
bookingwindows - availability and scheduling engine for pet-care bookings.
"""

__version__ = "0.1.0"
