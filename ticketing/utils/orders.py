"""
Order lifecycle: checkout -> payment -> confirmation, or cancellation/expiry.

    pending --(payment COMPLETED)--> confirmed
    pending --(cancel / TTL sweep)--> cancelled

Inventory is reserved when the pending order is created and given back only
when a pending order is cancelled. Status changes are conditional UPDATEs on
the order row, so a replayed confirmation or a cancel racing the sweep is a
no-op rather than a second decrement/increment.
"""

import json
import logging
import random
import string
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, Optional
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from ticketing.core.config import settings
from ticketing.core.errors import (
    CouponInvalidError,
    InsufficientInventoryError,
    NotFoundError,
    OrderStateError,
    PaymentNotCompletedError,
    ValidationFailedError,
)
from ticketing.models.booking import Booking, Order, PENDING, CONFIRMED, CANCELLED
from ticketing.models.event import EventDate
from ticketing.models.sku import SKU
from ticketing.models.time_slot import TimeSlot
from ticketing.schemas.booking import BookingCreate
from ticketing.utils import inventory
from ticketing.utils.coupons import redeem_coupon, validate_coupon
from ticketing.utils.payments import COMPLETED, PaymentSession
from ticketing.utils.pricing import ZERO, LineItem, allocate_discount, order_subtotal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    order: Order
    changed: bool  # False when the order was already in the target state


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _generate_order_number(db: Session) -> str:
    """Generate a unique 'TKT-XXXXXXXX' order reference."""
    chars = string.ascii_uppercase + string.digits
    while True:
        number = "TKT-" + "".join(random.choices(chars, k=8))
        if not db.query(Order).filter(Order.order_number == number).first():
            return number


def get_order(db: Session, order_id: UUID) -> Order:
    order = (
        db.query(Order)
        .options(
            joinedload(Order.bookings).joinedload(Booking.sku),
            joinedload(Order.time_slot).joinedload(TimeSlot.event_date).joinedload(EventDate.event),
        )
        .filter(Order.id == order_id)
        .first()
    )
    if not order:
        raise NotFoundError("Order not found")
    return order


def build_qr_payload(order: Order) -> str:
    """JSON document encoded into the ticket QR code."""
    slot = order.time_slot
    event_date = slot.event_date if slot else None
    event = event_date.event if event_date else None
    data = {
        "orderId": str(order.id),
        "orderNumber": order.order_number,
        "bookingIds": [str(b.id) for b in order.bookings],
        "visitorName": order.visitor_name,
        "visitorEmail": order.visitor_email,
        "tickets": [
            {
                "bookingId": str(b.id),
                "ticketType": b.sku.name if b.sku else "Ticket",
                "quantity": b.quantity,
                "price": float(b.total_price),
            }
            for b in order.bookings
        ],
        "totalPrice": float(order.total_amount),
        "date": event_date.date.isoformat() if event_date else None,
        "time": slot.start_time.strftime("%H:%M") if slot else None,
        "endTime": slot.end_time.strftime("%H:%M") if slot else None,
        "eventName": event.title if event else settings.EVENT_NAME,
        "venue": event.venue if event else None,
        "status": order.status,
    }
    return json.dumps(data, indent=2)


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


def create_order(db: Session, data: BookingCreate, now: Optional[datetime] = None) -> Order:
    """
    Turn a cart into a pending order.

    Prices come from the catalog, never from the client. Either every line
    is reserved and persisted or nothing is.
    """
    now = now or _utcnow()
    today = now.date()

    if not data.items:
        raise ValidationFailedError("Cart is empty")

    # One booking per distinct SKU
    quantities: Dict[UUID, int] = {}
    for item in data.items:
        if item.quantity <= 0:
            raise ValidationFailedError("Quantity must be greater than 0")
        quantities[item.sku_id] = quantities.get(item.sku_id, 0) + item.quantity

    slot = (
        db.query(TimeSlot)
        .options(joinedload(TimeSlot.event_date))
        .filter(TimeSlot.id == data.time_slot_id)
        .first()
    )
    if not slot:
        raise NotFoundError("Time slot not found")
    if not slot.event_date.is_available:
        raise ValidationFailedError("This date is not available for booking")
    if slot.event_date.date < today:
        raise ValidationFailedError("This date has already passed")
    event_id = slot.event_date.event_id

    skus = {
        sku.id: sku
        for sku in db.query(SKU).filter(
            SKU.id.in_(list(quantities)),
            SKU.event_id == event_id,
            SKU.is_active == True,  # noqa: E712
        )
    }
    for sku_id in quantities:
        if sku_id not in skus:
            raise NotFoundError(f"Ticket type {sku_id} not found or inactive")

    items = [
        LineItem(sku_id=sku_id, quantity=qty, unit_price=Decimal(skus[sku_id].base_price))
        for sku_id, qty in quantities.items()
    ]
    subtotal = order_subtotal(items)

    discount = ZERO
    coupon = None
    if data.coupon_code and data.coupon_code.strip():
        verdict = validate_coupon(db, data.coupon_code, event_id, subtotal, today)
        if not verdict.valid:
            raise CouponInvalidError(verdict.reason)
        discount = verdict.discount_amount
        coupon = verdict.coupon

    totals = allocate_discount(items, discount)

    try:
        for line in totals.lines:
            if not inventory.reserve(db, slot.id, line.sku_id, line.quantity):
                available = inventory.get_availability(db, slot.id, line.sku_id)
                raise InsufficientInventoryError(line.sku_id, line.quantity, available)

        order = Order(
            order_number=_generate_order_number(db),
            event_id=event_id,
            time_slot_id=slot.id,
            status=PENDING,
            subtotal=totals.subtotal,
            discount_amount=totals.discount_amount,
            total_amount=totals.total_amount,
            coupon_code=coupon.code if coupon else None,
            coupon_id=coupon.id if coupon else None,
            visitor_first_name=data.first_name,
            visitor_last_name=data.last_name,
            visitor_email=data.email,
            visitor_phone=data.phone,
            expires_at=now + timedelta(minutes=settings.RESERVATION_TTL_MINUTES),
        )
        db.add(order)
        db.flush()

        visitor_name = order.visitor_name
        for line in totals.lines:
            db.add(Booking(
                order_id=order.id,
                time_slot_id=slot.id,
                sku_id=line.sku_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
                subtotal=line.subtotal,
                discount_amount=line.discount_amount,
                total_price=line.total_price,
                coupon_code=order.coupon_code,
                visitor_name=visitor_name,
                visitor_email=data.email,
                visitor_phone=data.phone,
                status=PENDING,
            ))

        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "Order %s created: %d line(s), subtotal=%s discount=%s total=%s coupon=%s",
        order.order_number, len(totals.lines), totals.subtotal,
        totals.discount_amount, totals.total_amount, order.coupon_code,
    )
    return get_order(db, order.id)


# ---------------------------------------------------------------------------
# Payment
# ---------------------------------------------------------------------------


def start_payment(db: Session, order_id: UUID, gateway, redirect_url: str) -> PaymentSession:
    order = get_order(db, order_id)
    if order.status != PENDING:
        raise OrderStateError(f"Order is {order.status}; payment can only start for pending orders")

    session = gateway.create_payment(
        order.total_amount,
        redirect_url,
        message=f"Payment for {settings.EVENT_NAME} ({order.order_number})",
    )
    order.payment_order_id = session.merchant_order_id
    db.commit()
    return session


def payment_status_for(order: Order, gateway) -> str:
    if not order.payment_order_id:
        return "NOT_STARTED"
    return gateway.order_status(order.payment_order_id)


# ---------------------------------------------------------------------------
# Confirmation
# ---------------------------------------------------------------------------


def confirm_order(
    db: Session,
    order_id: UUID,
    payment_status: str,
    now: Optional[datetime] = None,
) -> Transition:
    """
    Mark a paid order confirmed, attach its QR payload and count the coupon
    use. Confirming an already-confirmed order changes nothing.
    """
    now = now or _utcnow()
    order = get_order(db, order_id)

    if order.status == CONFIRMED:
        return Transition(order=order, changed=False)
    if order.status == CANCELLED:
        raise OrderStateError("Order was cancelled and cannot be confirmed")
    if payment_status != COMPLETED:
        raise PaymentNotCompletedError(payment_status)

    try:
        updated = (
            db.query(Order)
            .filter(Order.id == order_id, Order.status == PENDING)
            .update({Order.status: CONFIRMED, Order.confirmed_at: now}, synchronize_session="fetch")
        )
        if not updated:
            # Lost a race with another confirmation or a cancellation
            db.rollback()
            order = get_order(db, order_id)
            if order.status == CONFIRMED:
                return Transition(order=order, changed=False)
            raise OrderStateError(f"Order is {order.status} and cannot be confirmed")

        db.refresh(order)
        payload = build_qr_payload(order)
        order.qr_payload = payload
        for booking in order.bookings:
            booking.status = CONFIRMED
            booking.qr_payload = payload

        if order.coupon_id and not order.coupon_redeemed:
            if redeem_coupon(db, order.coupon_id):
                order.coupon_redeemed = True
            else:
                logger.warning(
                    "Coupon %s hit its usage limit before order %s was confirmed; use not counted.",
                    order.coupon_code, order.order_number,
                )

        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Order %s confirmed (total=%s).", order.order_number, order.total_amount)
    return Transition(order=get_order(db, order_id), changed=True)


# ---------------------------------------------------------------------------
# Cancellation & expiry
# ---------------------------------------------------------------------------


def cancel_order(
    db: Session,
    order_id: UUID,
    reason: str = "cancelled",
    now: Optional[datetime] = None,
) -> Transition:
    """Cancel a pending order and hand its tickets back to the inventory."""
    now = now or _utcnow()
    order = get_order(db, order_id)

    if order.status == CANCELLED:
        return Transition(order=order, changed=False)
    if order.status == CONFIRMED:
        raise OrderStateError("Confirmed orders cannot be cancelled")

    try:
        updated = (
            db.query(Order)
            .filter(Order.id == order_id, Order.status == PENDING)
            .update(
                {Order.status: CANCELLED, Order.cancelled_at: now, Order.cancel_reason: reason},
                synchronize_session="fetch",
            )
        )
        if not updated:
            db.rollback()
            order = get_order(db, order_id)
            if order.status == CANCELLED:
                return Transition(order=order, changed=False)
            raise OrderStateError(f"Order is {order.status} and cannot be cancelled")

        for booking in order.bookings:
            inventory.release(db, booking.time_slot_id, booking.sku_id, booking.quantity)
            booking.status = CANCELLED

        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Order %s cancelled (%s); tickets released.", order.order_number, reason)
    return Transition(order=get_order(db, order_id), changed=True)


def release_expired_orders(db: Session, now: Optional[datetime] = None) -> int:
    """
    Cancel every pending order whose reservation window has passed.
    Returns the number of orders cancelled.
    """
    now = now or _utcnow()
    expired_ids = [
        order_id
        for (order_id,) in db.query(Order.id)
        .filter(Order.status == PENDING, Order.expires_at < now)
        .all()
    ]

    count = 0
    for order_id in expired_ids:
        try:
            if cancel_order(db, order_id, reason="expired", now=now).changed:
                count += 1
        except OrderStateError:
            # Confirmed between the scan and the cancel
            continue
    return count
