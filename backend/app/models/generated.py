from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
    Time,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


BOOKING_STATUSES = (
    'pending_approval', 'confirmed', 'completed', 'cancelled', 'no_show', 'declined',
)
PAYMENT_METHODS = ('cash', 'digital_wallet')
PAYMENT_STATUSES = ('unpaid', 'paid', 'refunded')
DISCOUNT_TYPES = ('percentage', 'fixed')
WALLET_TX_TYPES = ('top_up', 'commission_deduction', 'refund', 'withdrawal')
WALLET_TX_STATUSES = ('pending', 'approved', 'rejected')


class Businesses(Base):
    __tablename__ = 'businesses'

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, nullable=False)
    name = Column(Text, nullable=False)
    accepts_cash = Column(Boolean, nullable=False, server_default=text('1'))
    wallet_balance = Column(Float, nullable=False, server_default=text('0'))
    commission_rate = Column(Float, server_default=text('0.1'))  # NULL → default rate
    is_verified = Column(Boolean, nullable=False, server_default=text('0'))
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    hours = relationship('BusinessHours', back_populates='business')
    exceptions = relationship('BusinessAvailabilityExceptions', back_populates='business')
    services = relationship('Services', back_populates='business')
    coupons = relationship('Coupons', back_populates='business')
    bookings = relationship('Bookings', back_populates='business')
    wallet_transactions = relationship('WalletTransactions', back_populates='business')


class BusinessHours(Base):
    __tablename__ = 'business_hours'
    __table_args__ = (
        UniqueConstraint('business_id', 'day_of_week'),
    )

    id = Column(Integer, primary_key=True)
    business_id = Column(ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday ... 6 = Saturday
    open_time = Column(Time, nullable=False)
    close_time = Column(Time, nullable=False)
    is_closed = Column(Boolean, nullable=False, server_default=text('0'))

    business = relationship('Businesses', back_populates='hours')


class BusinessAvailabilityExceptions(Base):
    __tablename__ = 'business_availability_exceptions'
    __table_args__ = (
        Index('ix_exceptions_business_date', 'business_id', 'exception_date'),
    )

    id = Column(Integer, primary_key=True)
    business_id = Column(ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False)
    exception_date = Column(Date, nullable=False)
    is_closed = Column(Boolean, nullable=False, server_default=text('1'))
    open_time = Column(Time)  # NULL + is_closed = whole day closed
    close_time = Column(Time)
    reason = Column(Text)
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    business = relationship('Businesses', back_populates='exceptions')


class Services(Base):
    __tablename__ = 'services'

    id = Column(Integer, primary_key=True)
    business_id = Column(ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)
    sale_price = Column(Float)
    is_on_sale = Column(Boolean, nullable=False, server_default=text('0'))
    is_active = Column(Boolean, nullable=False, server_default=text('1'))

    business = relationship('Businesses', back_populates='services')
    bookings = relationship('Bookings', back_populates='service')


class Coupons(Base):
    __tablename__ = 'coupons'
    __table_args__ = (
        UniqueConstraint('business_id', 'code'),
    )

    id = Column(Integer, primary_key=True)
    business_id = Column(ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False)
    code = Column(Text, nullable=False)
    discount_type = Column(Enum(*DISCOUNT_TYPES, name='discount_type'), nullable=False)
    value = Column(Float, nullable=False)
    min_spend = Column(Float, nullable=False, server_default=text('0'))
    usage_limit = Column(Integer, nullable=False, server_default=text('1'))
    expires_at = Column(DateTime, nullable=False)

    business = relationship('Businesses', back_populates='coupons')


class Bookings(Base):
    __tablename__ = 'bookings'
    __table_args__ = (
        Index('ix_bookings_business_start', 'business_id', 'start_time'),
    )

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, nullable=False)
    business_id = Column(ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False)
    service_id = Column(ForeignKey('services.id'), nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(
        Enum(*BOOKING_STATUSES, name='booking_status'),
        nullable=False,
        server_default=text("'pending_approval'"),
    )
    payment_method = Column(Enum(*PAYMENT_METHODS, name='payment_method'), nullable=False)
    payment_status = Column(
        Enum(*PAYMENT_STATUSES, name='payment_status'),
        nullable=False,
        server_default=text("'unpaid'"),
    )
    original_price = Column(Float, nullable=False)
    discount_amount = Column(Float, nullable=False, server_default=text('0'))
    tip_amount = Column(Float, nullable=False, server_default=text('0'))
    platform_fee = Column(Float, nullable=False, server_default=text('0'))
    final_total = Column(Float, nullable=False)
    voucher_code_used = Column(Text)
    decline_reason = Column(Text)
    approved_by = Column(Integer)
    created_at = Column(DateTime, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(DateTime, nullable=False, server_default=text('CURRENT_TIMESTAMP'))

    business = relationship('Businesses', back_populates='bookings')
    service = relationship('Services', back_populates='bookings')
    wallet_transactions = relationship('WalletTransactions', back_populates='booking')


class WalletTransactions(Base):
    __tablename__ = 'wallet_transactions'

    id = Column(Integer, primary_key=True)
    business_id = Column(ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False)
    booking_id = Column(ForeignKey('bookings.id', ondelete='SET NULL'))
    amount = Column(Float, nullable=False)  # signed: debits negative
    type = Column(Enum(*WALLET_TX_TYPES, name='wallet_tx_type'), nullable=False)
    status = Column(
        Enum(*WALLET_TX_STATUSES, name='wallet_tx_status'),
        nullable=False,
        server_default=text("'pending'"),
    )
    reference_id = Column(Text)
    admin_notes = Column(Text)
    created_at = Column(DateTime, nullable=False, server_default=text('CURRENT_TIMESTAMP'))

    business = relationship('Businesses', back_populates='wallet_transactions')
    booking = relationship('Bookings', back_populates='wallet_transactions')
