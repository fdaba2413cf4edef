from uuid import UUID
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ticketing.db.session import get_db
from ticketing.api.deps import get_current_admin
from ticketing.api.errors import http_error
from ticketing.core.config import settings
from ticketing.core.errors import DomainError
from ticketing.models.event import EventDate
from ticketing.models.inventory import InventoryRecord
from ticketing.models.sku import SKU
from ticketing.models.time_slot import TimeSlot
from ticketing.schemas.inventory import (
    InventoryCreate,
    InventoryProvisionAll,
    InventoryProvisionResult,
    InventoryRecord as InventoryRecordSchema,
    InventoryUpdate,
)
from ticketing.utils import inventory

router = APIRouter(prefix="/admin/inventory", tags=["Admin - Inventory"])


@router.get("/", response_model=List[InventoryRecordSchema])
def list_inventory(
    event_id: Optional[UUID] = Query(None),
    time_slot_id: Optional[UUID] = Query(None),
    sku_id: Optional[UUID] = Query(None),
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    query = db.query(InventoryRecord)
    if event_id:
        query = (
            query.join(TimeSlot, TimeSlot.id == InventoryRecord.time_slot_id)
            .join(EventDate, EventDate.id == TimeSlot.event_date_id)
            .filter(EventDate.event_id == event_id)
        )
    if time_slot_id:
        query = query.filter(InventoryRecord.time_slot_id == time_slot_id)
    if sku_id:
        query = query.filter(InventoryRecord.sku_id == sku_id)
    return query.all()


@router.post("/", response_model=InventoryRecordSchema, status_code=status.HTTP_201_CREATED)
def create_inventory(
    data: InventoryCreate,
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    slot = db.query(TimeSlot).filter(TimeSlot.id == data.time_slot_id).first()
    if not slot:
        raise HTTPException(status_code=404, detail="Time slot not found")
    sku = db.query(SKU).filter(SKU.id == data.sku_id).first()
    if not sku:
        raise HTTPException(status_code=404, detail="SKU not found")

    try:
        record = inventory.provision(db, data.time_slot_id, data.sku_id, data.total_quantity)
        db.commit()
    except DomainError as e:
        db.rollback()
        raise http_error(e)
    db.refresh(record)
    return record


@router.post("/provision", response_model=InventoryProvisionResult)
def provision_event_inventory(
    data: InventoryProvisionAll,
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    """Create the missing inventory rows for every time slot of the event."""
    try:
        created = inventory.provision_all(db, data.event_id, data.totals)
        db.commit()
    except DomainError as e:
        db.rollback()
        raise http_error(e)
    return InventoryProvisionResult(created=created)


@router.patch("/{record_id}", response_model=InventoryRecordSchema)
def update_inventory_total(
    record_id: UUID,
    data: InventoryUpdate,
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    """
    Change a record's total. With `preserve_sold` (default) tickets already
    sold stay sold; `reset` makes the whole new total available again.
    """
    record = db.query(InventoryRecord).filter(InventoryRecord.id == record_id).first()
    if not record:
        raise HTTPException(status_code=404, detail="Inventory record not found")

    try:
        record = inventory.set_total(db, record, data.total_quantity, mode=data.mode or settings.INVENTORY_TOTAL_MODE)
        db.commit()
    except DomainError as e:
        db.rollback()
        raise http_error(e)
    db.refresh(record)
    return record
