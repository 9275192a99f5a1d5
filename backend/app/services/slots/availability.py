# backend/app/services/slots/availability.py
"""
Level 2: Service slots for a business on one day.

Tiles the Level 1 window with candidate slots [t, t + duration) where t steps
by the configured cadence (independent of duration), and marks each slot
unavailable when it overlaps a booking, overlaps a blackout, or starts in the
past. Slots are computed fresh on every call and never stored.

The result is best-effort: the booking insert is the final arbiter of overlap.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import InvalidInputError, NotFoundError
from ...repositories.availability_exceptions import ExceptionRepository
from ...repositories.bookings import BookingRepository
from ...repositories.catalog import ServiceRepository
from ...repositories.hours import HoursRepository
from ...utils.intervals import Interval, local_now
from .calculator import resolve_day_window
from .config import BookingConfig, get_booking_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeSlot:
    start_time: datetime
    end_time: datetime
    is_available: bool


class AvailabilityResolver:
    """Computes the slot list for (business, date, service)."""

    def __init__(
        self,
        hours: HoursRepository,
        exceptions: ExceptionRepository,
        services: ServiceRepository,
        bookings: BookingRepository,
        config: BookingConfig | None = None,
    ):
        self.hours = hours
        self.exceptions = exceptions
        self.services = services
        self.bookings = bookings
        self.config = config or get_booking_config()

    @classmethod
    def for_session(cls, db: Session, config: BookingConfig | None = None) -> "AvailabilityResolver":
        return cls(
            hours=HoursRepository(db),
            exceptions=ExceptionRepository(db),
            services=ServiceRepository(db),
            bookings=BookingRepository(db),
            config=config,
        )

    def resolve_slots(
        self,
        business_id: int,
        target_date: date,
        service_id: int,
        now: Optional[datetime] = None,
    ) -> list[TimeSlot]:
        """
        Ordered slots for the day.

        An empty list means the business is closed that day. Missing service,
        bad duration and store failures raise instead.
        """
        if not isinstance(target_date, date) or isinstance(target_date, datetime):
            raise InvalidInputError(f"Invalid date: {target_date!r}")

        now = now or local_now(self.config.timezone)

        # Step 1: Service duration drives slot width
        service = self.services.get_for_business(service_id, business_id)
        if service is None:
            raise NotFoundError(
                f"Service {service_id} not found for business {business_id}",
                details={"service_id": service_id, "business_id": business_id},
            )
        duration_minutes = service.duration_minutes
        if not isinstance(duration_minutes, int) or duration_minutes <= 0:
            raise InvalidInputError(
                f"Service {service_id} has invalid duration: {duration_minutes!r}",
                details={"service_id": service_id},
            )

        # Step 2: Effective window (exceptions, weekly hours, blackouts)
        window = resolve_day_window(self.hours, self.exceptions, business_id, target_date)
        if window is None:
            return []

        # Step 3: Intervals held by existing bookings
        booked = [
            Interval(b.start_time, b.end_time)
            for b in self.bookings.list_active_between(business_id, window.opens_at, window.closes_at)
        ]

        return tile_slots(
            window.interval,
            duration_minutes,
            self.config.slot_step_minutes,
            busy=booked + list(window.blackouts),
            now=now,
        )


def tile_slots(
    window: Interval,
    duration_minutes: int,
    step_minutes: int,
    busy: list[Interval],
    now: datetime,
) -> list[TimeSlot]:
    """
    Tile window with [t, t + duration) every step_minutes.

    The last slot is emitted only if it ends at or before the window close.
    """
    duration = timedelta(minutes=duration_minutes)
    step = timedelta(minutes=step_minutes)

    slots: list[TimeSlot] = []
    current = window.start
    while current + duration <= window.end:
        candidate = Interval(current, current + duration)
        is_available = (
            candidate.start >= now
            and not any(candidate.overlaps(other) for other in busy)
        )
        slots.append(TimeSlot(candidate.start, candidate.end, is_available))
        current += step

    return slots


def calculate_service_availability(
    db: Session,
    business_id: int,
    service_id: int,
    target_date: date,
    config: BookingConfig | None = None,
    now: datetime | None = None,
) -> dict:
    """
    Calculate slots for a service.

    Returns:
        Dict shaped for SlotsDayResponse.
    """
    resolver = AvailabilityResolver.for_session(db, config)
    slots = resolver.resolve_slots(business_id, target_date, service_id, now=now)

    logger.debug(
        f"Resolved {len(slots)} slots ({sum(s.is_available for s in slots)} available) "
        f"for business={business_id} service={service_id} date={target_date}"
    )

    return {
        "business_id": business_id,
        "service_id": service_id,
        "date": target_date,
        "slot_step_minutes": resolver.config.slot_step_minutes,
        "slots": [
            {
                "start_time": s.start_time,
                "end_time": s.end_time,
                "is_available": s.is_available,
            }
            for s in slots
        ],
    }
