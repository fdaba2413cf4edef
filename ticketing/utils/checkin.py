"""Gate check-in: turn a scanned QR payload into an admit / reject decision."""

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from ticketing.models.booking import Booking, Order, CONFIRMED
from ticketing.utils.orders import get_order
from ticketing.core.errors import NotFoundError

logger = logging.getLogger(__name__)

VALID = "valid"
INVALID = "invalid"
USED = "used"
EXPIRED = "expired"
WRONG_EVENT = "wrong_event"


@dataclass(frozen=True)
class ScanResult:
    status: str
    message: str
    order: Optional[Order] = None


def _order_id_from_payload(db: Session, qr_data: str) -> Optional[UUID]:
    try:
        data = json.loads(qr_data)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None

    try:
        if data.get("orderId"):
            return UUID(str(data["orderId"]))
        # Older tickets only carry booking ids
        booking_ids = data.get("bookingIds") or []
        if booking_ids:
            booking = db.query(Booking).filter(Booking.id == UUID(str(booking_ids[0]))).first()
            return booking.order_id if booking else None
    except ValueError:
        return None
    return None


def check_in(
    db: Session,
    qr_data: str,
    event_id: Optional[UUID] = None,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> ScanResult:
    now = now or datetime.now(timezone.utc)
    today = today or now.date()

    order_id = _order_id_from_payload(db, qr_data)
    if order_id is None:
        return ScanResult(INVALID, "Unreadable ticket")

    try:
        order = get_order(db, order_id)
    except NotFoundError:
        return ScanResult(INVALID, "Ticket not found")

    if order.status != CONFIRMED:
        return ScanResult(INVALID, f"Ticket is {order.status}", order)
    if event_id is not None and order.event_id != event_id:
        return ScanResult(WRONG_EVENT, "Ticket is for a different event", order)
    if order.time_slot.event_date.date < today:
        return ScanResult(EXPIRED, "Ticket date has passed", order)
    if order.checked_in_at is not None:
        return ScanResult(USED, "Ticket already used", order)

    updated = (
        db.query(Order)
        .filter(Order.id == order.id, Order.checked_in_at.is_(None))
        .update({Order.checked_in_at: now}, synchronize_session="fetch")
    )
    db.commit()
    db.refresh(order)
    if not updated:
        # Another gate admitted it first
        return ScanResult(USED, "Ticket already used", order)

    logger.info("Order %s checked in.", order.order_number)
    return ScanResult(VALID, "Entry allowed", order)
