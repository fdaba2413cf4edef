from typing import Optional
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, selectinload

from ticketing.db.session import get_db
from ticketing.api.deps import get_current_admin
from ticketing.models.booking import Booking, Order
from ticketing.models.event import EventDate
from ticketing.models.time_slot import TimeSlot
from ticketing.schemas.booking import ExpireResponse, Order as OrderSchema
from ticketing.schemas.common import PaginatedResponse
from ticketing.utils.orders import release_expired_orders

router = APIRouter(prefix="/admin/bookings", tags=["Admin - Bookings"])


@router.get("/", response_model=PaginatedResponse[OrderSchema])
def list_all_orders(
    # --- Filters ---
    status: Optional[str] = Query(None, description="Filter by order status (pending, confirmed, cancelled)"),
    event_id: Optional[UUID] = Query(None),
    time_slot_id: Optional[UUID] = Query(None),
    date: Optional[date] = Query(None, description="Filter by event date (YYYY-MM-DD)"),
    email: Optional[str] = Query(None, description="Filter by visitor e-mail (case-insensitive)"),
    coupon_code: Optional[str] = Query(None),
    # --- Pagination ---
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    """Every order, newest first, with its booking lines."""
    query = db.query(Order).options(selectinload(Order.bookings).selectinload(Booking.sku))

    if status:
        query = query.filter(Order.status == status)
    if event_id:
        query = query.filter(Order.event_id == event_id)
    if time_slot_id:
        query = query.filter(Order.time_slot_id == time_slot_id)
    if date:
        query = (
            query.join(TimeSlot, TimeSlot.id == Order.time_slot_id)
            .join(EventDate, EventDate.id == TimeSlot.event_date_id)
            .filter(EventDate.date == date)
        )
    if email:
        query = query.filter(Order.visitor_email.ilike(email.strip()))
    if coupon_code:
        query = query.filter(Order.coupon_code == coupon_code.strip().upper())

    total = query.count()
    orders = (
        query.order_by(Order.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return PaginatedResponse(
        data=[OrderSchema.model_validate(o) for o in orders],
        total=total,
        page=page,
        limit=limit,
        total_pages=-(-total // limit) if total else 0,
    )


@router.post("/expire", response_model=ExpireResponse)
def expire_pending_orders(
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    """Run the reservation-expiry sweep now instead of waiting for the background loop."""
    return ExpireResponse(expired=release_expired_orders(db))
