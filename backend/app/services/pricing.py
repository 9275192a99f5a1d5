# backend/app/services/pricing.py
"""
Checkout pricing for a single service booking.

Rule: sale price and coupon stack in this order:
  base   = sale_price if is_on_sale else price
  coupon = base × value / 100 (percentage) | value (fixed)
  total  = max(0, base − coupon)

The commission shown at checkout is the one the settlement engine will
charge: original_price × commission_rate.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..errors import InvalidInputError, NotFoundError
from ..models.generated import Businesses, Coupons, Services
from ..repositories.bookings import BookingRepository
from ..repositories.catalog import BusinessRepository, CouponRepository, ServiceRepository
from ..utils.intervals import local_now
from .slots.config import BookingConfig, get_booking_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceQuote:
    original_price: float
    sale_discount: float
    coupon_discount: float
    final_total: float
    commission_rate: float
    platform_fee: float
    cash_available: bool
    voucher_code: Optional[str] = None

    @property
    def discount_amount(self) -> float:
        return self.sale_discount + self.coupon_discount


def effective_commission_rate(business: Businesses, config: BookingConfig) -> float:
    # Only NULL falls back to the default. 0 is not "unset": a business with an
    # explicit 0 rate pays no commission.
    if business.commission_rate is None:
        return config.default_commission_rate
    return float(business.commission_rate)


def calculate_platform_fee(original_price: float, commission_rate: float) -> float:
    return original_price * commission_rate


def base_price(service: Services) -> float:
    if service.is_on_sale and service.sale_price is not None:
        return float(service.sale_price)
    return float(service.price)


def coupon_discount(coupon: Coupons, price: float) -> float:
    if coupon.discount_type == "percentage":
        return price * (float(coupon.value) / 100)
    return float(coupon.value)


class PricingService:
    def __init__(
        self,
        businesses: BusinessRepository,
        services: ServiceRepository,
        coupons: CouponRepository,
        bookings: BookingRepository,
        config: BookingConfig | None = None,
    ):
        self.businesses = businesses
        self.services = services
        self.coupons = coupons
        self.bookings = bookings
        self.config = config or get_booking_config()

    @classmethod
    def for_session(cls, db: Session, config: BookingConfig | None = None) -> "PricingService":
        return cls(
            BusinessRepository(db),
            ServiceRepository(db),
            CouponRepository(db),
            BookingRepository(db),
            config,
        )

    def validate_coupon(
        self,
        business_id: int,
        customer_id: int,
        code: str,
        spend: float,
        now: datetime,
    ) -> Coupons:
        """Coupon usable by customer at business for a base price of spend."""
        coupon = self.coupons.get_by_code(business_id, code)
        if coupon is None:
            raise InvalidInputError("Invalid coupon code", details={"code": code})

        if now > coupon.expires_at:
            raise InvalidInputError("Coupon has expired", details={"code": code})

        if spend < float(coupon.min_spend):
            raise InvalidInputError(
                f"Minimum spend of {float(coupon.min_spend):.2f} required",
                details={"code": code, "min_spend": float(coupon.min_spend)},
            )

        if self.bookings.count_coupon_usage(business_id, customer_id, code) > 0:
            raise InvalidInputError(
                "You have already used this promo code for this business.",
                details={"code": code},
            )

        return coupon

    def quote(
        self,
        business_id: int,
        service_id: int,
        customer_id: int,
        voucher_code: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> PriceQuote:
        business = self.businesses.get(business_id)
        if business is None:
            raise NotFoundError(f"Business {business_id} not found")

        service = self.services.get_for_business(service_id, business_id)
        if service is None:
            raise NotFoundError(f"Service {service_id} not found for business {business_id}")

        original = float(service.price)
        base = base_price(service)

        discount = 0.0
        code = voucher_code.strip() if voucher_code else None
        if code:
            now = now or local_now(self.config.timezone)
            coupon = self.validate_coupon(business_id, customer_id, code, base, now)
            discount = coupon_discount(coupon, base)

        rate = effective_commission_rate(business, self.config)
        fee = calculate_platform_fee(original, rate)

        return PriceQuote(
            original_price=original,
            sale_discount=original - base,
            coupon_discount=discount,
            final_total=max(0.0, base - discount),
            commission_rate=rate,
            platform_fee=fee,
            cash_available=bool(business.accepts_cash) and float(business.wallet_balance) >= fee,
            voucher_code=code,
        )
