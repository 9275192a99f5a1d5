# backend/app/services/booking_settlement.py
"""
Booking settlement: creating bookings and applying their wallet effects.

Commission model: every booking owes platform_fee = original_price × rate.
For cash bookings the business pays it from its prepaid wallet at creation
time (debit-then-refund): the debit and the insert are one transaction, and
any transition to a terminal state other than completed returns the held
commission in the same transaction as the status change.

Digital-wallet bookings are recorded as confirmed/paid immediately; capturing
the payment itself happens outside this engine.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..errors import (
    CompletionTooEarlyError,
    InsufficientWalletBalanceError,
    InvalidInputError,
    InvalidStatusTransitionError,
    NotFoundError,
)
from ..models.generated import BOOKING_STATUSES, PAYMENT_METHODS, Bookings
from ..repositories.bookings import BookingRepository, NewBooking
from ..repositories.catalog import BusinessRepository, CouponRepository, ServiceRepository
from ..utils.intervals import local_now, to_local
from .booking_status import (
    CompletionWindow,
    can_transition,
    completion_window,
    sources_for,
)
from .events import BookingEventPublisher
from .pricing import PricingService, base_price, calculate_platform_fee, effective_commission_rate
from .slots.config import BookingConfig, get_booking_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingCandidate:
    """What the checkout submits. The interval is trusted as chosen."""
    customer_id: int
    business_id: int
    service_id: int
    start_time: datetime
    end_time: datetime
    payment_method: str
    original_price: float
    discount_amount: float = 0.0
    final_total: Optional[float] = None
    voucher_code_used: Optional[str] = None
    tip_amount: float = 0.0


@dataclass(frozen=True)
class SettlementResult:
    booking_id: int
    status: str
    payment_status: str
    platform_fee: float


class BookingSettlementEngine:
    def __init__(
        self,
        businesses: BusinessRepository,
        services: ServiceRepository,
        bookings: BookingRepository,
        config: BookingConfig | None = None,
        events: BookingEventPublisher | None = None,
        pricing: PricingService | None = None,
    ):
        self.businesses = businesses
        self.services = services
        self.bookings = bookings
        self.config = config or get_booking_config()
        self.events = events or BookingEventPublisher()
        self.pricing = pricing or PricingService(
            businesses, services, CouponRepository(bookings.db), bookings, self.config
        )

    @classmethod
    def for_session(
        cls,
        db: Session,
        config: BookingConfig | None = None,
        events: BookingEventPublisher | None = None,
    ) -> "BookingSettlementEngine":
        return cls(
            businesses=BusinessRepository(db),
            services=ServiceRepository(db),
            bookings=BookingRepository(db),
            config=config,
            events=events,
        )

    # ── Creation ─────────────────────────────────────────────────────────

    def create_booking(self, candidate: BookingCandidate) -> SettlementResult:
        """
        Validate, price and insert a booking.

        Algorithm:
        1. Validate the candidate (payment method, interval, amounts)
        2. Get business (wallet_balance, commission_rate, accepts_cash) and service;
           a voucher code, when given, must pass the coupon rules
        3. platform_fee = original_price × commission_rate
        4. cash: require accepts_cash and wallet_balance >= fee, then
           debit + insert atomically (status=pending_approval, unpaid)
           digital_wallet: insert (status=confirmed, paid)
        """
        start_time, end_time = self._validate(candidate)

        business = self.businesses.get(candidate.business_id)
        if business is None:
            raise NotFoundError(f"Business {candidate.business_id} not found")

        service = self.services.get_for_business(candidate.service_id, candidate.business_id)
        if service is None:
            raise NotFoundError(
                f"Service {candidate.service_id} not found for business {candidate.business_id}"
            )

        voucher_code = candidate.voucher_code_used.strip() if candidate.voucher_code_used else None
        if voucher_code:
            self.pricing.validate_coupon(
                business.id,
                candidate.customer_id,
                voucher_code,
                base_price(service),
                local_now(self.config.timezone),
            )

        rate = effective_commission_rate(business, self.config)
        platform_fee = calculate_platform_fee(candidate.original_price, rate)
        final_total = candidate.final_total
        if final_total is None:
            final_total = max(0.0, candidate.original_price - candidate.discount_amount)

        is_cash = candidate.payment_method == "cash"
        values = NewBooking(
            customer_id=candidate.customer_id,
            business_id=candidate.business_id,
            service_id=candidate.service_id,
            start_time=start_time,
            end_time=end_time,
            status="pending_approval" if is_cash else "confirmed",
            payment_method=candidate.payment_method,
            payment_status="unpaid" if is_cash else "paid",
            original_price=candidate.original_price,
            discount_amount=candidate.discount_amount,
            platform_fee=platform_fee,
            final_total=final_total,
            tip_amount=candidate.tip_amount,
            voucher_code_used=voucher_code,
        )

        if is_cash:
            if not business.accepts_cash:
                raise InvalidInputError(
                    f"Business {business.id} does not accept cash payments",
                    details={"business_id": business.id},
                )
            if business.wallet_balance < platform_fee:
                logger.warning(
                    f"Cash booking rejected for business {business.id}: "
                    f"wallet {business.wallet_balance:.2f} < fee {platform_fee:.2f}"
                )
                raise InsufficientWalletBalanceError(business.id, business.wallet_balance, platform_fee)

            booking = self.bookings.cash_booking_insert_and_debit(values)
            logger.info(
                f"Booking {booking.id} created (cash, pending approval); "
                f"business {business.id} wallet debited {platform_fee:.2f}"
            )
        else:
            booking = self.bookings.insert(values)
            logger.info(f"Booking {booking.id} created (digital wallet, confirmed)")

        self.events.emit("booking_created", {
            "booking_id": booking.id,
            "business_id": booking.business_id,
            "customer_id": booking.customer_id,
            "status": booking.status,
        })

        return SettlementResult(
            booking_id=booking.id,
            status=booking.status,
            payment_status=booking.payment_status,
            platform_fee=booking.platform_fee,
        )

    def _validate(self, candidate: BookingCandidate) -> tuple[datetime, datetime]:
        if candidate.payment_method not in PAYMENT_METHODS:
            raise InvalidInputError(
                f"Unsupported payment method: {candidate.payment_method!r}",
                details={"allowed": list(PAYMENT_METHODS)},
            )

        start_time = to_local(candidate.start_time, self.config.timezone)
        end_time = to_local(candidate.end_time, self.config.timezone)
        if end_time <= start_time:
            raise InvalidInputError("end_time must be after start_time")

        if candidate.original_price < 0:
            raise InvalidInputError("original_price must be >= 0")
        if candidate.discount_amount < 0:
            raise InvalidInputError("discount_amount must be >= 0")
        if candidate.final_total is not None and candidate.final_total < 0:
            raise InvalidInputError("final_total must be >= 0")

        return start_time, end_time

    # ── Transitions ──────────────────────────────────────────────────────

    def accept_booking(self, booking_id: int, approver_id: Optional[int]) -> Bookings:
        """
        Owner confirms a pending booking.

        The commission of a cash booking was already debited at creation;
        confirmation only finalizes it.
        """
        booking = self.bookings.confirm(booking_id, approver_id)
        logger.info(f"Booking {booking_id} confirmed by {approver_id}")
        self._emit_status(booking)
        return booking

    def update_booking_status(
        self,
        booking_id: int,
        status: str,
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Bookings:
        """Apply a lifecycle transition, with its wallet effect if any."""
        if status not in BOOKING_STATUSES:
            raise InvalidInputError(
                f"Unknown booking status: {status!r}",
                details={"allowed": list(BOOKING_STATUSES)},
            )

        if status == "confirmed":
            return self.accept_booking(booking_id, None)
        if status == "completed":
            return self.complete_booking(booking_id, now=now)

        sources = sources_for(status)
        if not sources:
            current = self.bookings.get_or_raise(booking_id)
            raise InvalidStatusTransitionError(booking_id, current.status, status)

        # Remaining targets are the unserved terminal states
        closed = self.bookings.decline_and_refund(booking_id, status, sources, reason)
        if closed.refunded:
            logger.info(
                f"Booking {booking_id} {status}; refunded {closed.refunded:.2f} "
                f"to business {closed.booking.business_id}"
            )
        else:
            logger.info(f"Booking {booking_id} {status}")
        self._emit_status(closed.booking, refunded=closed.refunded)
        return closed.booking

    def completion_window(self, booking_id: int, now: Optional[datetime] = None) -> CompletionWindow:
        booking = self.bookings.get_or_raise(booking_id)
        duration = self._service_duration(booking)
        return completion_window(
            booking.start_time,
            duration,
            now or local_now(self.config.timezone),
            self.config.completion_min_wait_minutes,
        )

    def complete_booking(self, booking_id: int, now: Optional[datetime] = None) -> Bookings:
        """Confirmed → completed, not before start + min(wait, duration)."""
        booking = self.bookings.get_or_raise(booking_id)
        if not can_transition(booking.status, "completed"):
            raise InvalidStatusTransitionError(booking_id, booking.status, "completed")

        window = self.completion_window(booking_id, now=now)
        if not window.can_complete:
            logger.warning(
                f"Completion of booking {booking_id} rejected: "
                f"allowed at {window.allowed_at.isoformat()}"
            )
            raise CompletionTooEarlyError(booking_id, window.allowed_at, window.minutes_left)

        booking = self.bookings.complete(booking_id)
        logger.info(f"Booking {booking_id} completed")
        self._emit_status(booking)
        return booking

    # ── Queries ──────────────────────────────────────────────────────────

    def check_existing_bookings(
        self,
        business_id: int,
        target_date: Optional[date] = None,
        day_of_week: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> int:
        """Pending/confirmed bookings an owner should know about before a schedule change."""
        if day_of_week is not None and not 0 <= day_of_week <= 6:
            raise InvalidInputError("day_of_week must be within 0..6 (0 = Sunday)")
        return self.bookings.count_open(
            business_id,
            target_date=target_date,
            day_of_week=day_of_week,
            now=now or local_now(self.config.timezone),
        )

    # ── Helpers ──────────────────────────────────────────────────────────

    def _service_duration(self, booking: Bookings) -> int:
        service = self.services.get(booking.service_id)
        if service is not None:
            return service.duration_minutes
        return int((booking.end_time - booking.start_time).total_seconds() // 60)

    def _emit_status(self, booking: Bookings, **extra) -> None:
        self.events.emit(f"booking_{booking.status}", {
            "booking_id": booking.id,
            "business_id": booking.business_id,
            "customer_id": booking.customer_id,
            **extra,
        })
