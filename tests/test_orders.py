"""Tests for the order lifecycle: checkout, confirmation, cancellation and expiry."""
import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from ticketing.core.errors import (
    CouponInvalidError,
    InsufficientInventoryError,
    NotFoundError,
    OrderStateError,
    PaymentNotCompletedError,
    ValidationFailedError,
)
from ticketing.models.booking import CANCELLED, CONFIRMED, PENDING
from ticketing.models.event import EventDate
from ticketing.models.sku import SKU
from ticketing.schemas.booking import BookingCreate
from ticketing.utils import orders
from ticketing.utils.inventory import get_availability
from ticketing.utils.payments import COMPLETED, FAILED, DummyPaymentGateway


def _cart(catalog, visitor_data, items, coupon_code=None) -> BookingCreate:
    return BookingCreate(
        time_slot_id=catalog.slot_id,
        items=[{"sku_id": sku_id, "quantity": qty} for sku_id, qty in items],
        coupon_code=coupon_code,
        **visitor_data,
    )


def _available(db, catalog, sku_id):
    db.expire_all()
    return get_availability(db, catalog.slot_id, sku_id)


def test_checkout_with_coupon_end_to_end(db, catalog, visitor_data, make_coupon):
    coupon = make_coupon("SAVE10", event_id=catalog.event_id)

    order = orders.create_order(db, _cart(catalog, visitor_data, [(catalog.individual_id, 2)], "save10"))

    assert order.status == PENDING
    assert order.order_number.startswith("TKT-")
    assert order.subtotal == Decimal("2400.00")
    assert order.discount_amount == Decimal("240.00")
    assert order.total_amount == Decimal("2160.00")
    assert order.coupon_code == "SAVE10"
    assert len(order.bookings) == 1
    assert order.bookings[0].total_price == Decimal("2160.00")
    assert _available(db, catalog, catalog.individual_id) == 8

    transition = orders.confirm_order(db, order.id, COMPLETED)

    assert transition.changed is True
    assert transition.order.status == CONFIRMED
    assert all(b.status == CONFIRMED for b in transition.order.bookings)
    db.refresh(coupon)
    assert coupon.used_count == 1
    # Confirmation does not touch inventory again
    assert _available(db, catalog, catalog.individual_id) == 8


def test_lines_for_the_same_sku_are_merged(db, catalog, visitor_data):
    order = orders.create_order(db, _cart(
        catalog, visitor_data, [(catalog.individual_id, 1), (catalog.individual_id, 2)],
    ))
    assert len(order.bookings) == 1
    assert order.bookings[0].quantity == 3
    assert _available(db, catalog, catalog.individual_id) == 7


def test_discount_spread_across_lines(db, catalog, visitor_data, make_coupon):
    make_coupon("SAVE10")
    order = orders.create_order(db, _cart(
        catalog, visitor_data, [(catalog.individual_id, 2), (catalog.group_id, 1)], "SAVE10",
    ))

    assert order.total_amount == Decimal("6120.00")
    assert sum(b.total_price for b in order.bookings) == order.total_amount
    assert sum(b.discount_amount for b in order.bookings) == Decimal("680.00")


def test_checkout_is_all_or_nothing(db, catalog, visitor_data):
    with pytest.raises(InsufficientInventoryError) as exc:
        orders.create_order(db, _cart(
            catalog, visitor_data, [(catalog.individual_id, 2), (catalog.group_id, 6)],
        ))

    assert exc.value.requested == 6
    assert exc.value.available == 5
    assert _available(db, catalog, catalog.individual_id) == 10
    assert _available(db, catalog, catalog.group_id) == 5


def test_invalid_coupon_blocks_checkout(db, catalog, visitor_data):
    with pytest.raises(CouponInvalidError) as exc:
        orders.create_order(db, _cart(catalog, visitor_data, [(catalog.individual_id, 1)], "NOPE"))
    assert exc.value.reason == "Invalid coupon code"
    assert _available(db, catalog, catalog.individual_id) == 10


def test_inactive_sku_rejected(db, catalog, visitor_data):
    db.query(SKU).filter(SKU.id == catalog.group_id).update({SKU.is_active: False})
    db.commit()
    with pytest.raises(NotFoundError):
        orders.create_order(db, _cart(catalog, visitor_data, [(catalog.group_id, 1)]))


def test_unavailable_date_rejected(db, catalog, visitor_data):
    db.query(EventDate).filter(EventDate.id == catalog.date_id).update({EventDate.is_available: False})
    db.commit()
    with pytest.raises(ValidationFailedError):
        orders.create_order(db, _cart(catalog, visitor_data, [(catalog.individual_id, 1)]))


def test_confirm_requires_completed_payment(db, catalog, visitor_data):
    order = orders.create_order(db, _cart(catalog, visitor_data, [(catalog.individual_id, 1)]))

    with pytest.raises(PaymentNotCompletedError):
        orders.confirm_order(db, order.id, FAILED)

    assert orders.get_order(db, order.id).status == PENDING


def test_confirm_is_idempotent(db, catalog, visitor_data, make_coupon):
    coupon = make_coupon("SAVE10")
    order = orders.create_order(db, _cart(catalog, visitor_data, [(catalog.individual_id, 1)], "SAVE10"))

    first = orders.confirm_order(db, order.id, COMPLETED)
    second = orders.confirm_order(db, order.id, COMPLETED)

    assert first.changed is True
    assert second.changed is False
    assert second.order.status == CONFIRMED
    db.refresh(coupon)
    assert coupon.used_count == 1


def test_coupon_limit_hit_before_confirmation(db, catalog, visitor_data, make_coupon):
    coupon = make_coupon("ONCE", usage_limit=1)
    a = orders.create_order(db, _cart(catalog, visitor_data, [(catalog.individual_id, 1)], "ONCE"))
    b = orders.create_order(db, _cart(catalog, visitor_data, [(catalog.individual_id, 1)], "ONCE"))

    orders.confirm_order(db, a.id, COMPLETED)
    late = orders.confirm_order(db, b.id, COMPLETED)

    # Paid orders are confirmed regardless; the extra use is not counted
    assert late.order.status == CONFIRMED
    assert late.order.coupon_redeemed is False
    db.refresh(coupon)
    assert coupon.used_count == 1

    with pytest.raises(CouponInvalidError):
        orders.create_order(db, _cart(catalog, visitor_data, [(catalog.individual_id, 1)], "ONCE"))


def test_qr_payload(db, catalog, visitor_data):
    order = orders.create_order(db, _cart(catalog, visitor_data, [(catalog.group_id, 1)]))
    confirmed = orders.confirm_order(db, order.id, COMPLETED).order

    payload = json.loads(confirmed.qr_payload)
    assert payload["orderId"] == str(order.id)
    assert payload["orderNumber"] == order.order_number
    assert payload["bookingIds"] == [str(b.id) for b in confirmed.bookings]
    assert payload["visitorName"] == "Asha Verma"
    assert payload["tickets"][0]["ticketType"] == "Group of 4"
    assert payload["totalPrice"] == 4400.0
    assert payload["time"] == "10:00"
    assert payload["endTime"] == "12:00"
    assert payload["eventName"] == "Rangotsav 2026"
    assert payload["status"] == CONFIRMED
    assert confirmed.bookings[0].qr_payload == confirmed.qr_payload


def test_cancel_releases_tickets(db, catalog, visitor_data):
    order = orders.create_order(db, _cart(catalog, visitor_data, [(catalog.individual_id, 4)]))
    assert _available(db, catalog, catalog.individual_id) == 6

    transition = orders.cancel_order(db, order.id)
    assert transition.changed is True
    assert transition.order.status == CANCELLED
    assert _available(db, catalog, catalog.individual_id) == 10

    # A second cancel changes nothing and releases nothing
    assert orders.cancel_order(db, order.id).changed is False
    assert _available(db, catalog, catalog.individual_id) == 10


def test_confirmed_order_cannot_be_cancelled(db, catalog, visitor_data):
    order = orders.create_order(db, _cart(catalog, visitor_data, [(catalog.individual_id, 1)]))
    orders.confirm_order(db, order.id, COMPLETED)
    with pytest.raises(OrderStateError):
        orders.cancel_order(db, order.id)


def test_expiry_sweep(db, catalog, visitor_data):
    now = datetime.now(timezone.utc)
    stale = orders.create_order(db, _cart(catalog, visitor_data, [(catalog.individual_id, 3)]), now=now)
    fresh = orders.create_order(
        db, _cart(catalog, visitor_data, [(catalog.individual_id, 1)]), now=now + timedelta(minutes=10),
    )

    released = orders.release_expired_orders(db, now=now + timedelta(minutes=16))

    assert released == 1
    stale = orders.get_order(db, stale.id)
    assert stale.status == CANCELLED
    assert stale.cancel_reason == "expired"
    assert orders.get_order(db, fresh.id).status == PENDING
    assert _available(db, catalog, catalog.individual_id) == 9

    # Paying after the sweep is refused
    with pytest.raises(OrderStateError):
        orders.confirm_order(db, stale.id, COMPLETED)


def test_start_payment(db, catalog, visitor_data):
    gateway = DummyPaymentGateway()
    order = orders.create_order(db, _cart(catalog, visitor_data, [(catalog.individual_id, 1)]))

    session = orders.start_payment(db, order.id, gateway, "http://shop.test/booking")

    assert session.amount_paise == 120000
    assert session.redirect_url.startswith("http://shop.test/booking?merchant_order_id=")
    order = orders.get_order(db, order.id)
    assert order.payment_order_id == session.merchant_order_id
    assert orders.payment_status_for(order, gateway) == COMPLETED

    gateway.mark_failed(session.merchant_order_id)
    assert orders.payment_status_for(order, gateway) == FAILED
