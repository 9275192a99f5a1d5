# backend/app/services/schedule.py
"""
Owner-side schedule management: weekly hours and date exceptions.

Every change reports how many pending/confirmed bookings it may affect, so
the caller can warn the owner. Existing bookings are never moved or cancelled
by a schedule change.
"""

import logging
from dataclasses import dataclass
from datetime import date, time
from typing import Generic, Optional, TypeVar

from sqlalchemy.orm import Session

from ..errors import InvalidInputError, NotFoundError
from ..models.generated import BusinessAvailabilityExceptions, BusinessHours
from ..repositories.availability_exceptions import ExceptionRepository
from ..repositories.bookings import BookingRepository
from ..repositories.catalog import BusinessRepository
from ..repositories.hours import HoursRepository
from ..utils.intervals import local_now
from .slots.config import BookingConfig, get_booking_config

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ScheduleChange(Generic[T]):
    row: T
    affected_bookings: int


def validate_exception_shape(
    is_closed: bool,
    open_time: Optional[time],
    close_time: Optional[time],
) -> None:
    """
    Allowed shapes:
      - whole-day closure: is_closed, no times
      - blackout:          is_closed, both times
      - open override:     not is_closed, both times
    """
    if (open_time is None) != (close_time is None):
        raise InvalidInputError("open_time and close_time must be given together")
    if not is_closed and open_time is None:
        raise InvalidInputError("An open override needs open_time and close_time")
    if open_time is not None and close_time <= open_time:
        raise InvalidInputError("close_time must be after open_time")


class ScheduleService:
    def __init__(
        self,
        businesses: BusinessRepository,
        hours: HoursRepository,
        exceptions: ExceptionRepository,
        bookings: BookingRepository,
        config: BookingConfig | None = None,
    ):
        self.businesses = businesses
        self.hours = hours
        self.exceptions = exceptions
        self.bookings = bookings
        self.config = config or get_booking_config()

    @classmethod
    def for_session(cls, db: Session, config: BookingConfig | None = None) -> "ScheduleService":
        return cls(
            BusinessRepository(db),
            HoursRepository(db),
            ExceptionRepository(db),
            BookingRepository(db),
            config,
        )

    def _require_business(self, business_id: int) -> None:
        if self.businesses.get(business_id) is None:
            raise NotFoundError(f"Business {business_id} not found")

    # ── Weekly hours ─────────────────────────────────────────────────────

    def weekly_hours(self, business_id: int) -> list[BusinessHours]:
        self._require_business(business_id)
        return self.hours.list_for_business(business_id)

    def initialize_hours(self, business_id: int) -> list[BusinessHours]:
        self._require_business(business_id)
        rows = self.hours.initialize_defaults(business_id)
        logger.info(f"Default weekly hours created for business {business_id}")
        return rows

    def update_day(
        self,
        business_id: int,
        day_of_week: int,
        open_time: time,
        close_time: time,
        is_closed: bool,
    ) -> ScheduleChange[BusinessHours]:
        if not 0 <= day_of_week <= 6:
            raise InvalidInputError("day_of_week must be within 0..6 (0 = Sunday)")
        if not is_closed and close_time <= open_time:
            raise InvalidInputError("close_time must be after open_time")
        self._require_business(business_id)

        row = self.hours.upsert_day(business_id, day_of_week, open_time, close_time, is_closed)
        affected = self.bookings.count_open(
            business_id,
            day_of_week=day_of_week,
            now=local_now(self.config.timezone),
        )
        logger.info(
            f"Hours of business {business_id} day {day_of_week} set to "
            f"{'closed' if is_closed else f'{open_time}-{close_time}'} ({affected} open bookings)"
        )
        return ScheduleChange(row, affected)

    # ── Exceptions ───────────────────────────────────────────────────────

    def list_exceptions(self, business_id: int) -> list[BusinessAvailabilityExceptions]:
        self._require_business(business_id)
        return self.exceptions.list_for_business(business_id)

    def has_exception(self, business_id: int, exception_date: date) -> bool:
        return self.exceptions.exists_for_date(business_id, exception_date)

    def add_exception(
        self,
        business_id: int,
        exception_date: date,
        is_closed: bool,
        open_time: Optional[time] = None,
        close_time: Optional[time] = None,
        reason: Optional[str] = None,
    ) -> ScheduleChange[BusinessAvailabilityExceptions]:
        validate_exception_shape(is_closed, open_time, close_time)
        self._require_business(business_id)

        row = self.exceptions.create(
            business_id, exception_date, is_closed, open_time, close_time, reason
        )
        affected = self.bookings.count_open(business_id, target_date=exception_date)
        logger.info(
            f"Exception {row.id} added for business {business_id} on {exception_date} "
            f"({affected} open bookings that day)"
        )
        return ScheduleChange(row, affected)

    def remove_exception(self, business_id: int, exception_id: int) -> None:
        self.exceptions.delete(business_id, exception_id)
        logger.info(f"Exception {exception_id} removed for business {business_id}")
