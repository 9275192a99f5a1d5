# backend/app/errors.py
"""
Booking engine error taxonomy.

Every failure the slot resolver or the settlement engine can report is one of
these. Each carries the HTTP status the API layer answers with, so routers
never translate errors by hand.
"""

from datetime import datetime
from typing import Any, Optional

from fastapi import status


class BookingEngineError(Exception):
    """Base class for all engine errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }


class InvalidInputError(BookingEngineError):
    """Malformed date, zero/negative duration, bad payment method, etc."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(BookingEngineError):
    """Business, service, booking or exception id does not resolve."""

    status_code = status.HTTP_404_NOT_FOUND


class InsufficientWalletBalanceError(BookingEngineError):
    """Cash booking requested but the business cannot cover the commission."""

    status_code = status.HTTP_402_PAYMENT_REQUIRED

    def __init__(self, business_id: int, balance: float, required: float) -> None:
        super().__init__(
            f"Business wallet balance too low for this booking: "
            f"{balance:.2f} < {required:.2f}",
            details={
                "business_id": business_id,
                "wallet_balance": balance,
                "required": required,
            },
        )


class DataAccessError(BookingEngineError):
    """The store could not be reached or the statement failed."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class ConflictError(BookingEngineError):
    """The store rejected a write, e.g. an overlapping booking."""

    status_code = status.HTTP_409_CONFLICT


class InvalidStatusTransitionError(ConflictError):
    """Status change not allowed by the lifecycle (bookings, wallet requests)."""

    def __init__(self, booking_id: int, current: str, target: str, subject: str = "Booking") -> None:
        super().__init__(
            f"{subject} {booking_id} cannot move from '{current}' to '{target}'",
            details={"booking_id": booking_id, "current": current, "target": target},
        )


class CompletionTooEarlyError(InvalidStatusTransitionError):
    """Completion attempted before the minimum wait after start_time."""

    def __init__(self, booking_id: int, allowed_at: datetime, minutes_left: int) -> None:
        BookingEngineError.__init__(
            self,
            f"Booking {booking_id} can be completed in {minutes_left} "
            f"min{'s' if minutes_left != 1 else ''}",
            details={
                "booking_id": booking_id,
                "allowed_at": allowed_at.isoformat(),
                "minutes_left": minutes_left,
            },
        )
        self.allowed_at = allowed_at
        self.minutes_left = minutes_left
