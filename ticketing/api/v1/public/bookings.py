from uuid import UUID
from typing import Optional

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from ticketing.api.deps import get_notifier, get_payment_gateway
from ticketing.api.errors import http_error
from ticketing.core.config import settings
from ticketing.core.errors import DomainError
from ticketing.db.session import get_db
from ticketing.schemas.booking import (
    BookingCreate,
    Order as OrderSchema,
    OrderCancelRequest,
    OrderTransitionResponse,
    PaymentStartRequest,
    PaymentStartResponse,
)
from ticketing.utils import orders
from ticketing.utils.notifications import TicketNotifier, send_ticket_notification
from ticketing.utils.payments import DummyPaymentGateway

router = APIRouter(prefix="/bookings", tags=["Bookings"])


# ---------------------------------------------------------------------------
# POST /bookings: checkout: reserve tickets and open a pending order
# ---------------------------------------------------------------------------


@router.post("/", response_model=OrderSchema, status_code=status.HTTP_201_CREATED)
def create_booking(data: BookingCreate, db: Session = Depends(get_db)):
    """
    Create a pending order for one time slot.

    - Prices are looked up from the catalog; a coupon, if given, is checked
      against the recomputed subtotal and must be valid.
    - Tickets are held until `expires_at`; unpaid orders are then cancelled
      and the tickets go back on sale.
    """
    try:
        return orders.create_order(db, data)
    except DomainError as e:
        raise http_error(e)


@router.get("/{order_id}", response_model=OrderSchema)
def get_booking(order_id: UUID, db: Session = Depends(get_db)):
    try:
        return orders.get_order(db, order_id)
    except DomainError as e:
        raise http_error(e)


# ---------------------------------------------------------------------------
# Payment & confirmation
# ---------------------------------------------------------------------------


@router.post("/{order_id}/payment", response_model=PaymentStartResponse)
def start_payment(
    order_id: UUID,
    data: Optional[PaymentStartRequest] = Body(None),
    db: Session = Depends(get_db),
    gateway: DummyPaymentGateway = Depends(get_payment_gateway),
):
    """Open a payment session and return the URL to send the visitor to."""
    redirect_url = (data.redirect_url if data else None) or settings.PAYMENT_REDIRECT_URL
    try:
        session = orders.start_payment(db, order_id, gateway, redirect_url)
    except DomainError as e:
        raise http_error(e)
    return PaymentStartResponse(
        order_id=order_id,
        merchant_order_id=session.merchant_order_id,
        redirect_url=session.redirect_url,
        amount_paise=session.amount_paise,
    )


@router.post("/{order_id}/confirm", response_model=OrderTransitionResponse)
def confirm_booking(
    order_id: UUID,
    db: Session = Depends(get_db),
    gateway: DummyPaymentGateway = Depends(get_payment_gateway),
    notifier: TicketNotifier = Depends(get_notifier),
):
    """
    Payment callback. Asks the gateway for the payment state and confirms the
    order only when it is COMPLETED. Calling it again for a confirmed order
    returns the same order with `changed: false`.
    """
    try:
        order = orders.get_order(db, order_id)
        payment_status = orders.payment_status_for(order, gateway)
        transition = orders.confirm_order(db, order_id, payment_status)
    except DomainError as e:
        raise http_error(e)

    if transition.changed:
        send_ticket_notification(db, notifier, transition.order)

    return OrderTransitionResponse(
        changed=transition.changed,
        order=OrderSchema.model_validate(transition.order),
    )


@router.post("/{order_id}/cancel", response_model=OrderTransitionResponse)
def cancel_booking(
    order_id: UUID,
    data: Optional[OrderCancelRequest] = Body(None),
    db: Session = Depends(get_db),
):
    """Abandon a pending order; its tickets go back on sale at once."""
    reason = (data.reason if data else None) or "cancelled"
    try:
        transition = orders.cancel_order(db, order_id, reason=reason)
    except DomainError as e:
        raise http_error(e)
    return OrderTransitionResponse(
        changed=transition.changed,
        order=OrderSchema.model_validate(transition.order),
    )
