# backend/app/repositories/bookings.py
"""
Booking persistence and the two atomic settlement effects.

Status changes are compare-and-set updates (`WHERE status IN (...)`), so two
concurrent transitions of the same booking cannot both succeed, and a refund
can only ever be paid by the transition that actually won.

Overlap rejection at write time is checked inside the inserting transaction,
after the business row has been write-locked. Every booking insert of a
business takes that lock first, so a second writer waits (or fails as busy on
SQLite) instead of passing the overlap check against a stale view.
"""

from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from sqlalchemy import func

from ..errors import (
    ConflictError,
    InsufficientWalletBalanceError,
    InvalidStatusTransitionError,
    NotFoundError,
)
from ..models.generated import Bookings, Businesses, WalletTransactions
from ..utils.intervals import day_bounds, weekday_index
from .base import BaseRepository

# Bookings in these states do not occupy their interval
RELEASED_STATUSES = ("cancelled", "declined")
# Bookings an owner must be warned about before changing the schedule
OPEN_STATUSES = ("pending_approval", "confirmed")


@dataclass(frozen=True)
class NewBooking:
    """Fully priced booking row, ready for insertion."""
    customer_id: int
    business_id: int
    service_id: int
    start_time: datetime
    end_time: datetime
    status: str
    payment_method: str
    payment_status: str
    original_price: float
    discount_amount: float
    platform_fee: float
    final_total: float
    tip_amount: float = 0.0
    voucher_code_used: Optional[str] = None


@dataclass(frozen=True)
class ClosedBooking:
    """Result of a declining/cancelling transition."""
    booking: Bookings
    refunded: float


class BookingRepository(BaseRepository[Bookings]):
    model = Bookings

    # ── Reads ────────────────────────────────────────────────────────────

    def get_or_raise(self, booking_id: int) -> Bookings:
        booking = self.get(booking_id)
        if booking is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        return booking

    def list_active_between(
        self,
        business_id: int,
        start: datetime,
        end: datetime,
    ) -> list[Bookings]:
        """Bookings occupying any part of [start, end), by start_time."""
        with self.reading(f"bookings for business {business_id}"):
            return (
                self.db.query(Bookings)
                .filter(
                    Bookings.business_id == business_id,
                    Bookings.status.notin_(RELEASED_STATUSES),
                    Bookings.start_time < end,
                    Bookings.end_time > start,
                )
                .order_by(Bookings.start_time)
                .all()
            )

    def count_open(
        self,
        business_id: int,
        target_date: Optional[date] = None,
        day_of_week: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> int:
        """
        Count pending/confirmed bookings.

        - target_date: bookings starting on that date
        - day_of_week: upcoming bookings (from the start of today) on that weekday
        - neither: every open booking of the business
        """
        query = self.db.query(Bookings).filter(
            Bookings.business_id == business_id,
            Bookings.status.in_(OPEN_STATUSES),
        )

        with self.reading(f"open bookings for business {business_id}"):
            if target_date is not None:
                bounds = day_bounds(target_date)
                return (
                    query.filter(
                        Bookings.start_time >= bounds.start,
                        Bookings.start_time < bounds.end,
                    )
                    .count()
                )

            if day_of_week is not None:
                today = (now or datetime.now()).date()
                upcoming = query.filter(Bookings.start_time >= day_bounds(today).start).all()
                return sum(1 for b in upcoming if weekday_index(b.start_time.date()) == day_of_week)

            return query.count()

    def count_coupon_usage(self, business_id: int, customer_id: int, code: str) -> int:
        """Bookings by customer with this code that were not cancelled/declined."""
        with self.reading(f"coupon usage of {code!r}"):
            return (
                self.db.query(Bookings)
                .filter(
                    Bookings.business_id == business_id,
                    Bookings.customer_id == customer_id,
                    Bookings.voucher_code_used == code,
                    Bookings.status.notin_(RELEASED_STATUSES),
                )
                .count()
            )

    # ── Writes ───────────────────────────────────────────────────────────

    def insert(self, values: NewBooking) -> Bookings:
        """Plain insert (no wallet effect), still rejected on overlap."""
        booking = Bookings(**asdict(values))
        with self.transaction():
            self._lock_business(values.business_id)
            self._ensure_interval_free(values.business_id, values.start_time, values.end_time)
            self.db.add(booking)
        self.db.refresh(booking)
        return booking

    def cash_booking_insert_and_debit(self, values: NewBooking) -> Bookings:
        """
        Debit the commission and insert the booking as one transaction.

        The debit is a conditional UPDATE (`wallet_balance >= fee`), so two
        concurrent requests cannot both pass the balance check. It also
        write-locks the business row ahead of the overlap check. Any failure
        after it (overlap, insert error) rolls the debit back.
        """
        fee = values.platform_fee
        booking = Bookings(**asdict(values))

        with self.transaction():
            debited = (
                self.db.query(Businesses)
                .filter(
                    Businesses.id == values.business_id,
                    Businesses.wallet_balance >= fee,
                )
                .update(
                    {Businesses.wallet_balance: Businesses.wallet_balance - fee},
                    synchronize_session=False,
                )
            )
            if not debited:
                business = self.db.get(Businesses, values.business_id, populate_existing=True)
                if business is None:
                    raise NotFoundError(f"Business {values.business_id} not found")
                raise InsufficientWalletBalanceError(business.id, business.wallet_balance, fee)

            self._ensure_interval_free(values.business_id, values.start_time, values.end_time)

            self.db.add(booking)
            self.db.flush()
            self.db.add(WalletTransactions(
                business_id=values.business_id,
                booking_id=booking.id,
                amount=-fee,
                type="commission_deduction",
                status="approved",
            ))

        self.db.refresh(booking)
        return booking

    def confirm(self, booking_id: int, approver_id: Optional[int]) -> Bookings:
        return self._transition(
            booking_id,
            "confirmed",
            ("pending_approval",),
            {Bookings.approved_by: approver_id},
        )

    def complete(self, booking_id: int) -> Bookings:
        return self._transition(booking_id, "completed", ("confirmed",), {})

    def decline_and_refund(
        self,
        booking_id: int,
        status: str,
        from_statuses: Sequence[str],
        reason: Optional[str] = None,
    ) -> ClosedBooking:
        """
        Move a booking to a non-completed terminal status and, in the same
        transaction, return any commission still held to the business wallet.
        """
        refunded = 0.0
        with self.transaction():
            booking = self._load(booking_id)
            values = {Bookings.decline_reason: reason}
            if booking.payment_method == "digital_wallet" and booking.payment_status == "paid" \
                    and status in RELEASED_STATUSES:
                values[Bookings.payment_status] = "refunded"

            self._compare_and_set(booking, status, from_statuses, values)

            held = self._commission_held(booking_id)
            if held > 0:
                self.db.query(Businesses).filter(Businesses.id == booking.business_id).update(
                    {Businesses.wallet_balance: Businesses.wallet_balance + held},
                    synchronize_session=False,
                )
                self.db.add(WalletTransactions(
                    business_id=booking.business_id,
                    booking_id=booking_id,
                    amount=held,
                    type="refund",
                    status="approved",
                    admin_notes=f"Commission returned: booking {status}",
                ))
                refunded = held

        self.db.refresh(booking)
        return ClosedBooking(booking=booking, refunded=refunded)

    # ── Helpers ──────────────────────────────────────────────────────────

    def _load(self, booking_id: int) -> Bookings:
        booking = self.db.get(Bookings, booking_id, populate_existing=True)
        if booking is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        return booking

    def _transition(
        self,
        booking_id: int,
        status: str,
        from_statuses: Sequence[str],
        values: dict,
    ) -> Bookings:
        with self.transaction():
            booking = self._load(booking_id)
            self._compare_and_set(booking, status, from_statuses, values)
        self.db.refresh(booking)
        return booking

    def _compare_and_set(
        self,
        booking: Bookings,
        status: str,
        from_statuses: Sequence[str],
        values: dict,
    ) -> None:
        updated = (
            self.db.query(Bookings)
            .filter(Bookings.id == booking.id, Bookings.status.in_(from_statuses))
            .update(
                {**values, Bookings.status: status, Bookings.updated_at: func.now()},
                synchronize_session=False,
            )
        )
        if not updated:
            raise InvalidStatusTransitionError(booking.id, booking.status, status)

    def _lock_business(self, business_id: int) -> None:
        """Write-lock the business row; serializes booking inserts per business."""
        locked = (
            self.db.query(Businesses)
            .filter(Businesses.id == business_id)
            .update(
                {Businesses.wallet_balance: Businesses.wallet_balance},
                synchronize_session=False,
            )
        )
        if not locked:
            raise NotFoundError(f"Business {business_id} not found")

    def _commission_held(self, booking_id: int) -> float:
        total = (
            self.db.query(func.coalesce(func.sum(WalletTransactions.amount), 0.0))
            .filter(
                WalletTransactions.booking_id == booking_id,
                WalletTransactions.type.in_(("commission_deduction", "refund")),
                WalletTransactions.status == "approved",
            )
            .scalar()
        )
        return -float(total) if total < 0 else 0.0

    def _ensure_interval_free(self, business_id: int, start: datetime, end: datetime) -> None:
        clash = (
            self.db.query(Bookings.id)
            .filter(
                Bookings.business_id == business_id,
                Bookings.status.notin_(RELEASED_STATUSES),
                Bookings.start_time < end,
                Bookings.end_time > start,
            )
            .first()
        )
        if clash is not None:
            self.logger.warning(
                f"Booking interval {start}–{end} of business {business_id} "
                f"overlaps booking {clash.id}"
            )
            raise ConflictError(
                "The selected time slot is no longer available",
                details={"business_id": business_id, "conflicting_booking_id": clash.id},
            )
