from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ticketing.db.session import get_db
from ticketing.api.deps import get_current_admin
from ticketing.models.booking import Order
from ticketing.models.event import Event, EventDate
from ticketing.models.time_slot import TimeSlot
from ticketing.schemas.catalog import EventDate as EventDateSchema, EventDateCreate, EventDateUpdate
from ticketing.schemas.common import DeletedResponse

router = APIRouter(prefix="/admin/dates", tags=["Admin - Dates"])


def _get_date(db: Session, date_id: UUID) -> EventDate:
    event_date = db.query(EventDate).filter(EventDate.id == date_id).first()
    if not event_date:
        raise HTTPException(status_code=404, detail="Event date not found")
    return event_date


@router.post("/", response_model=EventDateSchema, status_code=status.HTTP_201_CREATED)
def create_date(
    data: EventDateCreate,
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    if not db.query(Event).filter(Event.id == data.event_id).first():
        raise HTTPException(status_code=404, detail="Event not found")
    duplicate = db.query(EventDate).filter(
        EventDate.event_id == data.event_id,
        EventDate.date == data.date,
    ).first()
    if duplicate:
        raise HTTPException(status_code=409, detail="This date already exists for the event")

    event_date = EventDate(event_id=data.event_id, date=data.date, is_available=True)
    db.add(event_date)
    db.commit()
    db.refresh(event_date)
    return event_date


@router.patch("/{date_id}", response_model=EventDateSchema)
def toggle_date(
    date_id: UUID,
    data: EventDateUpdate,
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    """Open or close a date for booking. Existing orders are untouched."""
    event_date = _get_date(db, date_id)
    event_date.is_available = data.is_available
    db.commit()
    db.refresh(event_date)
    return event_date


@router.delete("/{date_id}", response_model=DeletedResponse)
def delete_date(
    date_id: UUID,
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    """Delete a date with its time slots and inventory. Dates with orders are kept."""
    event_date = _get_date(db, date_id)
    has_orders = (
        db.query(Order.id)
        .join(TimeSlot, TimeSlot.id == Order.time_slot_id)
        .filter(TimeSlot.event_date_id == date_id)
        .first()
    )
    if has_orders:
        raise HTTPException(
            status_code=409,
            detail="This date has bookings; mark it unavailable instead",
        )

    db.delete(event_date)
    db.commit()
    return DeletedResponse(id=str(date_id))
