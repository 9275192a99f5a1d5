# backend/app/repositories/hours.py

from datetime import time
from typing import Optional

from ..models.generated import BusinessHours
from .base import BaseRepository

DEFAULT_OPEN = time(9, 0)
DEFAULT_CLOSE = time(17, 0)
WEEKEND = (0, 6)  # Sunday, Saturday


class HoursRepository(BaseRepository[BusinessHours]):
    """Weekly operating hours, one row per (business, day_of_week)."""

    model = BusinessHours

    def get_for_day(self, business_id: int, day_of_week: int) -> Optional[BusinessHours]:
        with self.reading(f"hours for business {business_id} day {day_of_week}"):
            return (
                self.db.query(BusinessHours)
                .filter(
                    BusinessHours.business_id == business_id,
                    BusinessHours.day_of_week == day_of_week,
                )
                .first()
            )

    def list_for_business(self, business_id: int) -> list[BusinessHours]:
        with self.reading(f"hours for business {business_id}"):
            return (
                self.db.query(BusinessHours)
                .filter(BusinessHours.business_id == business_id)
                .order_by(BusinessHours.day_of_week)
                .all()
            )

    def upsert_day(
        self,
        business_id: int,
        day_of_week: int,
        open_time: time,
        close_time: time,
        is_closed: bool,
    ) -> BusinessHours:
        with self.transaction():
            row = (
                self.db.query(BusinessHours)
                .filter(
                    BusinessHours.business_id == business_id,
                    BusinessHours.day_of_week == day_of_week,
                )
                .first()
            )
            if row is None:
                row = BusinessHours(business_id=business_id, day_of_week=day_of_week)
                self.db.add(row)
            row.open_time = open_time
            row.close_time = close_time
            row.is_closed = is_closed
        self.db.refresh(row)
        return row

    def initialize_defaults(self, business_id: int) -> list[BusinessHours]:
        """09:00–17:00 every day, closed on weekends. Days already set are kept."""
        with self.transaction():
            existing = {
                day for (day,) in self.db.query(BusinessHours.day_of_week)
                .filter(BusinessHours.business_id == business_id)
            }
            for day in range(7):
                if day in existing:
                    continue
                self.db.add(BusinessHours(
                    business_id=business_id,
                    day_of_week=day,
                    open_time=DEFAULT_OPEN,
                    close_time=DEFAULT_CLOSE,
                    is_closed=day in WEEKEND,
                ))
        return self.list_for_business(business_id)
