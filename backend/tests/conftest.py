from datetime import date, datetime, time

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import get_db
from app.dependencies import get_config, get_event_publisher
from app.main import app
from app.models.generated import (
    Base,
    Bookings,
    BusinessAvailabilityExceptions,
    BusinessHours,
    Businesses,
    Coupons,
    Services,
)
from app.services.events import BookingEventPublisher
from app.services.slots import BookingConfig

# 2030-01-07 is a Monday (day_of_week 1), 2030-01-06 a Sunday (0)
MONDAY = date(2030, 1, 7)
SUNDAY = date(2030, 1, 6)
BEFORE = datetime(2030, 1, 1, 8, 0)

CONFIG = BookingConfig()


def at(target_date: date, hhmm: str) -> datetime:
    hours, minutes = map(int, hhmm.split(":"))
    return datetime.combine(target_date, time(hours, minutes))


class RecordingPublisher(BookingEventPublisher):
    """Keeps emitted events in memory instead of pushing them to Redis."""

    def __init__(self):
        super().__init__(redis=None)
        self.events: list[tuple[str, dict]] = []

    def emit(self, event_type: str, payload: dict) -> None:
        self.events.append((event_type, payload))

    @property
    def types(self) -> list[str]:
        return [t for t, _ in self.events]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def enable_sqlite_fk(dbapi_connection, _):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def events() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def client(session_factory, events):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_config] = lambda: CONFIG
    app.dependency_overrides[get_event_publisher] = lambda: events
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ── Factories ────────────────────────────────────────────────────────────


def _save(db: Session, obj):
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture
def make_business(db):
    def factory(wallet_balance=500.0, commission_rate=0.10, accepts_cash=True, **kwargs):
        return _save(db, Businesses(
            owner_id=kwargs.pop("owner_id", 1),
            name=kwargs.pop("name", "Glow Studio"),
            wallet_balance=wallet_balance,
            commission_rate=commission_rate,
            accepts_cash=accepts_cash,
            **kwargs,
        ))
    return factory


@pytest.fixture
def make_service(db):
    def factory(business, duration_minutes=60, price=1000.0, **kwargs):
        return _save(db, Services(
            business_id=business.id,
            name=kwargs.pop("name", "Haircut"),
            duration_minutes=duration_minutes,
            price=price,
            **kwargs,
        ))
    return factory


@pytest.fixture
def make_hours(db):
    def factory(business, day_of_week, open_time="09:00", close_time="17:00", is_closed=False):
        return _save(db, BusinessHours(
            business_id=business.id,
            day_of_week=day_of_week,
            open_time=time.fromisoformat(open_time),
            close_time=time.fromisoformat(close_time),
            is_closed=is_closed,
        ))
    return factory


@pytest.fixture
def make_exception(db):
    def factory(business, exception_date, is_closed=True, open_time=None, close_time=None, reason=None):
        return _save(db, BusinessAvailabilityExceptions(
            business_id=business.id,
            exception_date=exception_date,
            is_closed=is_closed,
            open_time=time.fromisoformat(open_time) if open_time else None,
            close_time=time.fromisoformat(close_time) if close_time else None,
            reason=reason,
        ))
    return factory


@pytest.fixture
def make_booking(db):
    def factory(business, service, start, end, status="confirmed", payment_method="cash", **kwargs):
        return _save(db, Bookings(
            customer_id=kwargs.pop("customer_id", 100),
            business_id=business.id,
            service_id=service.id,
            start_time=start,
            end_time=end,
            status=status,
            payment_method=payment_method,
            original_price=kwargs.pop("original_price", float(service.price)),
            final_total=kwargs.pop("final_total", float(service.price)),
            **kwargs,
        ))
    return factory


@pytest.fixture
def make_coupon(db):
    def factory(business, code="SAVE10", discount_type="percentage", value=10.0,
                min_spend=0.0, expires_at=datetime(2031, 1, 1)):
        return _save(db, Coupons(
            business_id=business.id,
            code=code,
            discount_type=discount_type,
            value=value,
            min_spend=min_spend,
            expires_at=expires_at,
        ))
    return factory


@pytest.fixture
def monday_shop(make_business, make_service, make_hours):
    """Business open Monday 09:00–17:00 with a 60-minute, 1000.00 service."""
    business = make_business()
    service = make_service(business)
    make_hours(business, 1)
    return business, service
