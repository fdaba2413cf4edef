from uuid import UUID
from typing import List, Optional
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session, joinedload

from ticketing.db.session import get_db
from ticketing.models.event import EventDate
from ticketing.models.sku import SKU
from ticketing.models.time_slot import TimeSlot
from ticketing.schemas.catalog import (
    EventDate as EventDateSchema,
    SKU as SKUSchema,
    SKUAvailability,
    SlotAvailabilityResponse,
    TimeSlotAvailability,
)
from ticketing.utils.inventory import availability_for_slot

router = APIRouter(prefix="/catalog", tags=["Catalog"])


def _active_skus(db: Session, event_id: UUID) -> List[SKU]:
    return (
        db.query(SKU)
        .filter(SKU.event_id == event_id, SKU.is_active == True)
        .order_by(SKU.base_price, SKU.name)
        .all()
    )


def _sku_availability(db: Session, slot: TimeSlot, skus: List[SKU]) -> List[SKUAvailability]:
    available = availability_for_slot(db, slot.id)
    return [
        SKUAvailability(
            sku_id=sku.id,
            name=sku.name,
            category=sku.category,
            base_price=sku.base_price,
            available_quantity=available.get(sku.id, 0),
        )
        for sku in skus
    ]


@router.get("/dates", response_model=List[EventDateSchema])
def list_available_dates(
    event_id: Optional[UUID] = Query(None, description="Restrict to one event"),
    db: Session = Depends(get_db),
):
    """Bookable dates, today onwards."""
    today = datetime.now(timezone.utc).date()
    query = db.query(EventDate).filter(EventDate.is_available == True, EventDate.date >= today)
    if event_id:
        query = query.filter(EventDate.event_id == event_id)
    return query.order_by(EventDate.date).all()


@router.get("/dates/{date_id}/time-slots", response_model=List[TimeSlotAvailability])
def list_time_slots(date_id: UUID, db: Session = Depends(get_db)):
    """Time slots of a date, each with tickets left per active SKU."""
    event_date = (
        db.query(EventDate)
        .options(joinedload(EventDate.time_slots))
        .filter(EventDate.id == date_id)
        .first()
    )
    if not event_date:
        raise HTTPException(status_code=404, detail="Event date not found")

    skus = _active_skus(db, event_date.event_id)
    return [
        TimeSlotAvailability(
            id=slot.id,
            event_date_id=slot.event_date_id,
            start_time=slot.start_time,
            end_time=slot.end_time,
            capacity=slot.capacity,
            skus=_sku_availability(db, slot, skus),
        )
        for slot in event_date.time_slots
    ]


@router.get("/skus", response_model=List[SKUSchema])
def list_skus(
    event_id: Optional[UUID] = Query(None, description="Restrict to one event"),
    db: Session = Depends(get_db),
):
    query = db.query(SKU).filter(SKU.is_active == True)
    if event_id:
        query = query.filter(SKU.event_id == event_id)
    return query.order_by(SKU.base_price, SKU.name).all()


@router.get("/time-slots/{slot_id}/availability", response_model=SlotAvailabilityResponse)
def get_slot_availability(slot_id: UUID, db: Session = Depends(get_db)):
    slot = (
        db.query(TimeSlot)
        .options(joinedload(TimeSlot.event_date))
        .filter(TimeSlot.id == slot_id)
        .first()
    )
    if not slot:
        raise HTTPException(status_code=404, detail="Time slot not found")

    return SlotAvailabilityResponse(
        time_slot_id=slot.id,
        date=slot.event_date.date,
        start_time=slot.start_time,
        end_time=slot.end_time,
        skus=_sku_availability(db, slot, _active_skus(db, slot.event_date.event_id)),
    )
