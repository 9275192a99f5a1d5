# backend/app/dependencies.py
"""FastAPI dependencies: engine services bound to the request session."""

from fastapi import Depends
from sqlalchemy.orm import Session

from .database import get_db
from .redis_client import get_redis
from .services.booking_settlement import BookingSettlementEngine
from .services.events import BookingEventPublisher
from .services.pricing import PricingService
from .services.schedule import ScheduleService
from .services.slots import BookingConfig, get_booking_config
from .services.wallet import WalletService


def get_config() -> BookingConfig:
    return get_booking_config()


def get_event_publisher() -> BookingEventPublisher:
    return BookingEventPublisher(get_redis())


def get_settlement_engine(
    db: Session = Depends(get_db),
    config: BookingConfig = Depends(get_config),
    events: BookingEventPublisher = Depends(get_event_publisher),
) -> BookingSettlementEngine:
    return BookingSettlementEngine.for_session(db, config, events)


def get_pricing_service(
    db: Session = Depends(get_db),
    config: BookingConfig = Depends(get_config),
) -> PricingService:
    return PricingService.for_session(db, config)


def get_schedule_service(
    db: Session = Depends(get_db),
    config: BookingConfig = Depends(get_config),
) -> ScheduleService:
    return ScheduleService.for_session(db, config)


def get_wallet_service(db: Session = Depends(get_db)) -> WalletService:
    return WalletService.for_session(db)
