# backend/app/repositories/availability_exceptions.py

from datetime import date, time
from typing import Optional

from ..errors import NotFoundError
from ..models.generated import BusinessAvailabilityExceptions
from .base import BaseRepository


class ExceptionRepository(BaseRepository[BusinessAvailabilityExceptions]):
    """Date-specific closures, blackouts and open overrides."""

    model = BusinessAvailabilityExceptions

    def list_for_date(self, business_id: int, target_date: date) -> list[BusinessAvailabilityExceptions]:
        """Exceptions for one date, oldest first (stable order for open overrides)."""
        with self.reading(f"exceptions for business {business_id} on {target_date}"):
            return (
                self.db.query(BusinessAvailabilityExceptions)
                .filter(
                    BusinessAvailabilityExceptions.business_id == business_id,
                    BusinessAvailabilityExceptions.exception_date == target_date,
                )
                .order_by(BusinessAvailabilityExceptions.id)
                .all()
            )

    def list_for_business(self, business_id: int) -> list[BusinessAvailabilityExceptions]:
        with self.reading(f"exceptions for business {business_id}"):
            return (
                self.db.query(BusinessAvailabilityExceptions)
                .filter(BusinessAvailabilityExceptions.business_id == business_id)
                .order_by(
                    BusinessAvailabilityExceptions.exception_date,
                    BusinessAvailabilityExceptions.id,
                )
                .all()
            )

    def exists_for_date(self, business_id: int, target_date: date) -> bool:
        with self.reading(f"exceptions for business {business_id} on {target_date}"):
            return (
                self.db.query(BusinessAvailabilityExceptions.id)
                .filter(
                    BusinessAvailabilityExceptions.business_id == business_id,
                    BusinessAvailabilityExceptions.exception_date == target_date,
                )
                .first()
                is not None
            )

    def create(
        self,
        business_id: int,
        exception_date: date,
        is_closed: bool,
        open_time: Optional[time] = None,
        close_time: Optional[time] = None,
        reason: Optional[str] = None,
    ) -> BusinessAvailabilityExceptions:
        row = BusinessAvailabilityExceptions(
            business_id=business_id,
            exception_date=exception_date,
            is_closed=is_closed,
            open_time=open_time,
            close_time=close_time,
            reason=reason,
        )
        with self.transaction():
            self.db.add(row)
        self.db.refresh(row)
        return row

    def delete(self, business_id: int, exception_id: int) -> None:
        with self.transaction():
            row = self.db.get(BusinessAvailabilityExceptions, exception_id)
            if row is None or row.business_id != business_id:
                raise NotFoundError(f"Exception {exception_id} not found")
            self.db.delete(row)
