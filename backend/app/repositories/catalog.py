# backend/app/repositories/catalog.py
"""Businesses, services and coupons: read-mostly lookups for the engine."""

from typing import Optional

from ..models.generated import Businesses, Coupons, Services
from .base import BaseRepository


class BusinessRepository(BaseRepository[Businesses]):
    model = Businesses

    def get_wallet_balance(self, business_id: int) -> Optional[float]:
        with self.reading(f"wallet balance of business {business_id}"):
            return (
                self.db.query(Businesses.wallet_balance)
                .filter(Businesses.id == business_id)
                .scalar()
            )


class ServiceRepository(BaseRepository[Services]):
    model = Services

    def get_for_business(self, service_id: int, business_id: int) -> Optional[Services]:
        """Active service offered by business_id, or None."""
        with self.reading(f"service {service_id}"):
            return (
                self.db.query(Services)
                .filter(
                    Services.id == service_id,
                    Services.business_id == business_id,
                    Services.is_active.is_(True),
                )
                .first()
            )


class CouponRepository(BaseRepository[Coupons]):
    model = Coupons

    def get_by_code(self, business_id: int, code: str) -> Optional[Coupons]:
        with self.reading(f"coupon {code!r}"):
            return (
                self.db.query(Coupons)
                .filter(Coupons.business_id == business_id, Coupons.code == code)
                .first()
            )
