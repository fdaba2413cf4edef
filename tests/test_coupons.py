"""Tests for coupon validation (pure) and redemption (usage counting)."""
from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

from ticketing.models.coupon import DiscountType
from ticketing.utils import coupons
from ticketing.utils.coupons import redeem_coupon, validate_coupon


def test_percentage_coupon(db, catalog, today, make_coupon):
    make_coupon("SAVE10", event_id=catalog.event_id)

    verdict = validate_coupon(db, "SAVE10", catalog.event_id, Decimal("2400"), today)

    assert verdict.valid is True
    assert verdict.reason is None
    assert verdict.discount_amount == Decimal("240.00")
    assert verdict.final_total == Decimal("2160.00")


def test_lookup_is_trimmed_and_case_insensitive(db, catalog, today, make_coupon):
    make_coupon("SAVE10")
    verdict = validate_coupon(db, "  save10 ", catalog.event_id, Decimal("1000"), today)
    assert verdict.valid is True
    assert verdict.coupon.code == "SAVE10"


def test_unknown_code(db, catalog, today):
    verdict = validate_coupon(db, "NOPE", catalog.event_id, Decimal("1000"), today)
    assert verdict.valid is False
    assert verdict.reason == coupons.INVALID_CODE


def test_percentage_discount_is_capped(db, catalog, today, make_coupon):
    make_coupon("BIG20", discount_value="20", max_discount=Decimal("100"))
    verdict = validate_coupon(db, "BIG20", catalog.event_id, Decimal("1000"), today)
    assert verdict.discount_amount == Decimal("100.00")
    assert verdict.final_total == Decimal("900.00")


def test_fixed_discount_never_exceeds_subtotal(db, catalog, today, make_coupon):
    make_coupon("FLAT500", discount_type=DiscountType.fixed_amount, discount_value="500")
    verdict = validate_coupon(db, "FLAT500", catalog.event_id, Decimal("300"), today)
    assert verdict.valid is True
    assert verdict.discount_amount == Decimal("300.00")
    assert verdict.final_total == Decimal("0.00")


def test_checks_run_in_order(db, catalog, today, make_coupon):
    # Inactive and expired: the inactive reason wins
    make_coupon("OLD", is_active=False, end_date=today - timedelta(days=1))
    verdict = validate_coupon(db, "OLD", catalog.event_id, Decimal("1000"), today)
    assert verdict.reason == coupons.NOT_ACTIVE


def test_wrong_event(db, catalog, today, make_coupon):
    make_coupon("SAVE10", event_id=catalog.event_id)
    verdict = validate_coupon(db, "SAVE10", uuid4(), Decimal("1000"), today)
    assert verdict.reason == coupons.WRONG_EVENT


def test_global_coupon_matches_any_event(db, today, make_coupon):
    make_coupon("ANYWHERE")
    assert validate_coupon(db, "ANYWHERE", uuid4(), Decimal("1000"), today).valid is True
    assert validate_coupon(db, "ANYWHERE", None, Decimal("1000"), today).valid is True


def test_event_coupon_previewed_without_event(db, catalog, today, make_coupon):
    make_coupon("EVT10", event_id=catalog.event_id)
    verdict = validate_coupon(db, "EVT10", None, Decimal("1000"), today)
    assert verdict.valid is True
    assert verdict.discount_amount == Decimal("100")


def test_date_window(db, catalog, today, make_coupon):
    make_coupon("SOON", start_date=today + timedelta(days=1))
    make_coupon("GONE", end_date=today - timedelta(days=1))
    make_coupon("LASTDAY", start_date=today, end_date=today)

    assert validate_coupon(db, "SOON", catalog.event_id, Decimal("1000"), today).reason == coupons.NOT_YET_ACTIVE
    assert validate_coupon(db, "GONE", catalog.event_id, Decimal("1000"), today).reason == coupons.EXPIRED
    assert validate_coupon(db, "LASTDAY", catalog.event_id, Decimal("1000"), today).valid is True


def test_usage_limit_reached(db, catalog, today, make_coupon):
    make_coupon("ONCE", usage_limit=1, used_count=1)
    verdict = validate_coupon(db, "ONCE", catalog.event_id, Decimal("1000"), today)
    assert verdict.reason == coupons.USAGE_LIMIT_REACHED


def test_minimum_order_amount(db, catalog, today, make_coupon):
    make_coupon("MIN5K", min_order_amount=Decimal("5000"))

    verdict = validate_coupon(db, "MIN5K", catalog.event_id, Decimal("2400"), today)
    assert verdict.valid is False
    assert verdict.reason == "Minimum order amount of ₹5000 required"

    assert validate_coupon(db, "MIN5K", catalog.event_id, Decimal("5000"), today).valid is True


def test_validation_does_not_consume_uses(db, catalog, today, make_coupon):
    coupon = make_coupon("SAVE10", usage_limit=5)
    for _ in range(3):
        validate_coupon(db, "SAVE10", catalog.event_id, Decimal("1000"), today)
    db.refresh(coupon)
    assert coupon.used_count == 0


def test_redeem_stops_at_limit(db, make_coupon):
    coupon = make_coupon("ONCE", usage_limit=1)

    assert redeem_coupon(db, coupon.id) is True
    db.commit()
    assert redeem_coupon(db, coupon.id) is False
    db.commit()

    db.refresh(coupon)
    assert coupon.used_count == 1


def test_redeem_unlimited_coupon(db, make_coupon):
    coupon = make_coupon("OPEN")
    for _ in range(3):
        assert redeem_coupon(db, coupon.id) is True
    db.commit()
    db.refresh(coupon)
    assert coupon.used_count == 3
