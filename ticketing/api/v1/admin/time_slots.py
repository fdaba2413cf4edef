from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ticketing.db.session import get_db
from ticketing.api.deps import get_current_admin
from ticketing.models.booking import Order
from ticketing.models.event import EventDate
from ticketing.models.time_slot import TimeSlot
from ticketing.schemas.catalog import TimeSlot as TimeSlotSchema, TimeSlotCreate
from ticketing.schemas.common import DeletedResponse

router = APIRouter(prefix="/admin/time-slots", tags=["Admin - Time Slots"])


@router.post("/", response_model=TimeSlotSchema, status_code=status.HTTP_201_CREATED)
def create_time_slot(
    data: TimeSlotCreate,
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    """
    Add a time slot to an event date.
    Inventory is not created here; provision it via /admin/inventory.
    """
    if not db.query(EventDate).filter(EventDate.id == data.event_date_id).first():
        raise HTTPException(status_code=404, detail="Event date not found")

    duplicate = db.query(TimeSlot).filter(
        TimeSlot.event_date_id == data.event_date_id,
        TimeSlot.start_time == data.start_time,
    ).first()
    if duplicate:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"A time slot starting at {data.start_time} already exists on this date",
        )

    slot = TimeSlot(**data.model_dump())
    db.add(slot)
    db.commit()
    db.refresh(slot)
    return slot


@router.delete("/{slot_id}", response_model=DeletedResponse)
def delete_time_slot(
    slot_id: UUID,
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    slot = db.query(TimeSlot).filter(TimeSlot.id == slot_id).first()
    if not slot:
        raise HTTPException(status_code=404, detail="Time slot not found")
    if db.query(Order.id).filter(Order.time_slot_id == slot_id).first():
        raise HTTPException(status_code=409, detail="This time slot has bookings and cannot be deleted")

    db.delete(slot)
    db.commit()
    return DeletedResponse(id=str(slot_id))
