# backend/app/services/slots/config.py
"""
Booking configuration for slot resolution and settlement.
"""

from dataclasses import dataclass
from functools import lru_cache

from ...config import settings


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for the booking engine.

    Attributes:
        slot_step_minutes: Cadence of candidate start times (15/30/60),
            independent of service duration
        completion_min_wait_minutes: Upper bound of the wait after start_time
            before a booking may be completed (min(wait, duration) applies)
        default_commission_rate: Used when a business has no rate of its own
        timezone: IANA zone all wall-clock times are interpreted in
    """
    slot_step_minutes: int = 30
    completion_min_wait_minutes: int = 20
    default_commission_rate: float = 0.10
    timezone: str = "Asia/Manila"

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_step_minutes not in (15, 30, 60):
            raise ValueError(f"slot_step_minutes must be 15, 30, or 60, got {self.slot_step_minutes}")
        if self.completion_min_wait_minutes < 0:
            raise ValueError("completion_min_wait_minutes must be >= 0")
        if not 0 <= self.default_commission_rate <= 1:
            raise ValueError("default_commission_rate must be within [0, 1]")


@lru_cache
def get_booking_config() -> BookingConfig:
    """Booking configuration built from application settings."""
    return BookingConfig(
        slot_step_minutes=settings.slot_step_minutes,
        completion_min_wait_minutes=settings.completion_min_wait_minutes,
        default_commission_rate=settings.default_commission_rate,
        timezone=settings.timezone,
    )
