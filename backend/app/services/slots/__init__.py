"""
Slots calculation module.

Level 1: Effective opening window of a day (weekly hours + exceptions)
Level 2: Service slots tiled over the window (bookings, blackouts, "now")
"""

from .config import BookingConfig, get_booking_config
from .calculator import DayWindow, resolve_day_window
from .availability import (
    AvailabilityResolver,
    TimeSlot,
    calculate_service_availability,
    tile_slots,
)

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "DayWindow",
    "resolve_day_window",
    "AvailabilityResolver",
    "TimeSlot",
    "calculate_service_availability",
    "tile_slots",
]
