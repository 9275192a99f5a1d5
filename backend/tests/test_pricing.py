from datetime import datetime

import pytest

from app.errors import InvalidInputError, NotFoundError
from app.services.pricing import PricingService

from conftest import CONFIG, MONDAY, at

NOW = datetime(2030, 1, 1, 12, 0)


@pytest.fixture
def pricing(db):
    return PricingService.for_session(db, CONFIG)


def test_regular_price(pricing, monday_shop):
    business, service = monday_shop

    quote = pricing.quote(business.id, service.id, customer_id=100, now=NOW)

    assert quote.original_price == 1000
    assert quote.discount_amount == 0
    assert quote.final_total == 1000
    assert quote.commission_rate == pytest.approx(0.10)
    assert quote.platform_fee == pytest.approx(100.0)
    assert quote.cash_available


def test_sale_price_is_the_base(pricing, make_business, make_service):
    business = make_business()
    service = make_service(business, price=1000.0, sale_price=800.0, is_on_sale=True)

    quote = pricing.quote(business.id, service.id, customer_id=100, now=NOW)

    assert quote.sale_discount == pytest.approx(200.0)
    assert quote.final_total == pytest.approx(800.0)
    # commission follows the original price, as settlement charges it
    assert quote.platform_fee == pytest.approx(100.0)


def test_sale_price_ignored_when_not_on_sale(pricing, make_business, make_service):
    business = make_business()
    service = make_service(business, price=1000.0, sale_price=800.0, is_on_sale=False)

    quote = pricing.quote(business.id, service.id, customer_id=100, now=NOW)

    assert quote.final_total == pytest.approx(1000.0)


def test_percentage_coupon_applies_after_sale(pricing, make_business, make_service, make_coupon):
    business = make_business()
    service = make_service(business, price=1000.0, sale_price=800.0, is_on_sale=True)
    make_coupon(business, code="SAVE10", value=10.0)

    quote = pricing.quote(business.id, service.id, customer_id=100, voucher_code=" SAVE10 ", now=NOW)

    assert quote.coupon_discount == pytest.approx(80.0)
    assert quote.discount_amount == pytest.approx(280.0)
    assert quote.final_total == pytest.approx(720.0)
    assert quote.voucher_code == "SAVE10"


def test_fixed_coupon_never_goes_negative(pricing, monday_shop, make_coupon):
    business, service = monday_shop
    make_coupon(business, code="BIG", discount_type="fixed", value=5000.0)

    quote = pricing.quote(business.id, service.id, customer_id=100, voucher_code="BIG", now=NOW)

    assert quote.final_total == 0


@pytest.mark.parametrize(
    "coupon_kwargs, message",
    [
        ({"expires_at": datetime(2029, 12, 31)}, "expired"),
        ({"min_spend": 2000.0}, "Minimum spend"),
    ],
)
def test_coupon_rules(pricing, monday_shop, make_coupon, coupon_kwargs, message):
    business, service = monday_shop
    make_coupon(business, code="RULE", **coupon_kwargs)

    with pytest.raises(InvalidInputError) as exc:
        pricing.quote(business.id, service.id, customer_id=100, voucher_code="RULE", now=NOW)

    assert message in exc.value.message


def test_unknown_coupon(pricing, monday_shop):
    business, service = monday_shop
    with pytest.raises(InvalidInputError):
        pricing.quote(business.id, service.id, customer_id=100, voucher_code="NOPE", now=NOW)


def test_coupon_of_other_business(pricing, monday_shop, make_business, make_coupon):
    business, service = monday_shop
    make_coupon(make_business(name="Other"), code="SAVE10")

    with pytest.raises(InvalidInputError):
        pricing.quote(business.id, service.id, customer_id=100, voucher_code="SAVE10", now=NOW)


def test_coupon_single_use_per_customer(pricing, monday_shop, make_coupon, make_booking):
    business, service = monday_shop
    make_coupon(business, code="ONCE")
    make_booking(
        business, service, at(MONDAY, "10:00"), at(MONDAY, "11:00"),
        customer_id=100, voucher_code_used="ONCE",
    )

    with pytest.raises(InvalidInputError) as exc:
        pricing.quote(business.id, service.id, customer_id=100, voucher_code="ONCE", now=NOW)
    assert "already used" in exc.value.message

    # another customer may still use it
    quote = pricing.quote(business.id, service.id, customer_id=200, voucher_code="ONCE", now=NOW)
    assert quote.coupon_discount == pytest.approx(100.0)


def test_coupon_reusable_after_cancellation(pricing, monday_shop, make_coupon, make_booking):
    business, service = monday_shop
    make_coupon(business, code="ONCE")
    make_booking(
        business, service, at(MONDAY, "10:00"), at(MONDAY, "11:00"),
        status="cancelled", customer_id=100, voucher_code_used="ONCE",
    )

    quote = pricing.quote(business.id, service.id, customer_id=100, voucher_code="ONCE", now=NOW)

    assert quote.voucher_code == "ONCE"


def test_cash_unavailable(pricing, make_business, make_service):
    no_cash = make_business(accepts_cash=False)
    low_wallet = make_business(wallet_balance=10.0, name="Low")

    assert not pricing.quote(no_cash.id, make_service(no_cash).id, customer_id=1, now=NOW).cash_available
    assert not pricing.quote(low_wallet.id, make_service(low_wallet).id, customer_id=1, now=NOW).cash_available


def test_unknown_business_and_service(pricing, monday_shop):
    business, service = monday_shop
    with pytest.raises(NotFoundError):
        pricing.quote(9999, service.id, customer_id=1, now=NOW)
    with pytest.raises(NotFoundError):
        pricing.quote(business.id, 9999, customer_id=1, now=NOW)
