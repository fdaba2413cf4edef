"""
Inventory ledger: ticket counts per (time slot, SKU).

Every change to `available_quantity` is a single conditional UPDATE, so two
checkouts racing for the last tickets cannot both win. None of these
functions commit; callers decide the transaction boundary.
"""

import logging
from typing import Dict, Optional
from uuid import UUID

from sqlalchemy import case
from sqlalchemy.orm import Session

from ticketing.core.errors import ConflictError, ValidationFailedError
from ticketing.models.event import EventDate
from ticketing.models.inventory import InventoryRecord
from ticketing.models.sku import SKU
from ticketing.models.time_slot import TimeSlot

logger = logging.getLogger(__name__)

RESET = "reset"
PRESERVE_SOLD = "preserve_sold"
TOTAL_MODES = (RESET, PRESERVE_SOLD)


def _require_positive(quantity: int) -> None:
    if quantity <= 0:
        raise ValidationFailedError("Quantity must be greater than 0")


def get_record(db: Session, time_slot_id: UUID, sku_id: UUID) -> Optional[InventoryRecord]:
    return (
        db.query(InventoryRecord)
        .filter(
            InventoryRecord.time_slot_id == time_slot_id,
            InventoryRecord.sku_id == sku_id,
        )
        .first()
    )


def get_availability(db: Session, time_slot_id: UUID, sku_id: UUID) -> int:
    """Tickets left for a slot/SKU pair. A pair that was never provisioned has none."""
    available = (
        db.query(InventoryRecord.available_quantity)
        .filter(
            InventoryRecord.time_slot_id == time_slot_id,
            InventoryRecord.sku_id == sku_id,
        )
        .scalar()
    )
    return available or 0


def availability_for_slot(db: Session, time_slot_id: UUID) -> Dict[UUID, int]:
    rows = (
        db.query(InventoryRecord.sku_id, InventoryRecord.available_quantity)
        .filter(InventoryRecord.time_slot_id == time_slot_id)
        .all()
    )
    return {sku_id: available for sku_id, available in rows}


def reserve(db: Session, time_slot_id: UUID, sku_id: UUID, quantity: int) -> bool:
    """Take `quantity` tickets if at least that many are left. Returns success."""
    _require_positive(quantity)
    updated = (
        db.query(InventoryRecord)
        .filter(
            InventoryRecord.time_slot_id == time_slot_id,
            InventoryRecord.sku_id == sku_id,
            InventoryRecord.available_quantity >= quantity,
        )
        .update(
            {InventoryRecord.available_quantity: InventoryRecord.available_quantity - quantity},
            synchronize_session="fetch",
        )
    )
    return updated == 1


def release(db: Session, time_slot_id: UUID, sku_id: UUID, quantity: int) -> int:
    """Give back `quantity` tickets, never above the record's total."""
    _require_positive(quantity)
    restored = InventoryRecord.available_quantity + quantity
    updated = (
        db.query(InventoryRecord)
        .filter(
            InventoryRecord.time_slot_id == time_slot_id,
            InventoryRecord.sku_id == sku_id,
        )
        .update(
            {
                InventoryRecord.available_quantity: case(
                    (restored > InventoryRecord.total_quantity, InventoryRecord.total_quantity),
                    else_=restored,
                )
            },
            synchronize_session="fetch",
        )
    )
    if not updated:
        logger.warning(
            "Release of %d ticket(s) for slot %s / SKU %s found no inventory row.",
            quantity, time_slot_id, sku_id,
        )
    return updated


def provision(db: Session, time_slot_id: UUID, sku_id: UUID, total_quantity: int) -> InventoryRecord:
    """Create the inventory row for a slot/SKU pair with every ticket available."""
    if total_quantity < 0:
        raise ValidationFailedError("total_quantity cannot be negative")
    if get_record(db, time_slot_id, sku_id):
        raise ConflictError("Inventory already exists for this time slot and SKU")

    record = InventoryRecord(
        time_slot_id=time_slot_id,
        sku_id=sku_id,
        total_quantity=total_quantity,
        available_quantity=total_quantity,
    )
    db.add(record)
    db.flush()
    return record


def provision_all(db: Session, event_id: UUID, total_by_sku: Dict[UUID, int]) -> int:
    """
    Create missing inventory rows for every time slot of an event crossed with
    the given SKUs. Existing rows are left alone. Returns the number created.
    """
    slot_ids = [
        slot_id
        for (slot_id,) in db.query(TimeSlot.id)
        .join(EventDate, EventDate.id == TimeSlot.event_date_id)
        .filter(EventDate.event_id == event_id)
        .all()
    ]
    valid_skus = {
        sku_id
        for (sku_id,) in db.query(SKU.id)
        .filter(SKU.event_id == event_id, SKU.id.in_(list(total_by_sku)))
        .all()
    }
    unknown = set(total_by_sku) - valid_skus
    if unknown:
        raise ValidationFailedError(f"SKU(s) not found for this event: {', '.join(sorted(map(str, unknown)))}")

    existing = {
        (slot_id, sku_id)
        for slot_id, sku_id in db.query(InventoryRecord.time_slot_id, InventoryRecord.sku_id)
        .filter(InventoryRecord.time_slot_id.in_(slot_ids))
        .all()
    }

    created = 0
    for slot_id in slot_ids:
        for sku_id, total in total_by_sku.items():
            if total < 0:
                raise ValidationFailedError("total_quantity cannot be negative")
            if (slot_id, sku_id) in existing:
                continue
            db.add(InventoryRecord(
                time_slot_id=slot_id,
                sku_id=sku_id,
                total_quantity=total,
                available_quantity=total,
            ))
            created += 1

    db.flush()
    return created


def set_total(db: Session, record: InventoryRecord, new_total: int, mode: str = PRESERVE_SOLD) -> InventoryRecord:
    """
    Admin edit of a record's total.

    `reset` sets available to the new total (tickets already sold are
    forgotten). `preserve_sold` keeps them: available = new_total - sold,
    floored at zero. Both are one UPDATE computed in the database.
    """
    if new_total < 0:
        raise ValidationFailedError("total_quantity cannot be negative")
    if mode not in TOTAL_MODES:
        raise ValidationFailedError(f"mode must be one of: {', '.join(TOTAL_MODES)}")

    if mode == RESET:
        new_available = new_total
    else:
        remaining = new_total - (InventoryRecord.total_quantity - InventoryRecord.available_quantity)
        new_available = case((remaining < 0, 0), else_=remaining)

    (
        db.query(InventoryRecord)
        .filter(InventoryRecord.id == record.id)
        .update(
            {
                InventoryRecord.available_quantity: new_available,
                InventoryRecord.total_quantity: new_total,
            },
            synchronize_session="fetch",
        )
    )
    db.refresh(record)
    logger.info(
        "Inventory %s total set to %d (%s); available now %d.",
        record.id, new_total, mode, record.available_quantity,
    )
    return record
