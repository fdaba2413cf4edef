from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ticketing.db.session import get_db
from ticketing.api.deps import get_current_admin
from ticketing.models.booking import Booking
from ticketing.models.event import Event
from ticketing.models.sku import SKU
from ticketing.schemas.catalog import SKU as SKUSchema, SKUCreate, SKUUpdate
from ticketing.schemas.common import DeletedResponse

router = APIRouter(prefix="/admin/skus", tags=["Admin - SKUs"])


def _get_sku(db: Session, sku_id: UUID) -> SKU:
    sku = db.query(SKU).filter(SKU.id == sku_id).first()
    if not sku:
        raise HTTPException(status_code=404, detail="SKU not found")
    return sku


def _check_name_free(db: Session, event_id: UUID, name: str, exclude_id: UUID = None):
    query = db.query(SKU).filter(SKU.event_id == event_id, SKU.name == name)
    if exclude_id:
        query = query.filter(SKU.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=409, detail="A ticket type with this name already exists")


@router.post("/", response_model=SKUSchema, status_code=status.HTTP_201_CREATED)
def create_sku(
    data: SKUCreate,
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    if not db.query(Event).filter(Event.id == data.event_id).first():
        raise HTTPException(status_code=404, detail="Event not found")
    name = data.name.strip()
    _check_name_free(db, data.event_id, name)

    sku = SKU(**data.model_dump(exclude={"name"}), name=name, is_active=True)
    db.add(sku)
    db.commit()
    db.refresh(sku)
    return sku


@router.patch("/{sku_id}", response_model=SKUSchema)
def update_sku(
    sku_id: UUID,
    data: SKUUpdate,
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    """Partial update. Price changes apply to new orders only."""
    sku = _get_sku(db, sku_id)
    updates = data.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in updates:
        updates["name"] = updates["name"].strip()
        _check_name_free(db, sku.event_id, updates["name"], exclude_id=sku.id)

    for field, value in updates.items():
        setattr(sku, field, value)

    db.commit()
    db.refresh(sku)
    return sku


@router.delete("/{sku_id}", response_model=DeletedResponse)
def delete_sku(
    sku_id: UUID,
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    sku = _get_sku(db, sku_id)
    if db.query(Booking.id).filter(Booking.sku_id == sku_id).first():
        raise HTTPException(
            status_code=409,
            detail="This ticket type has bookings; deactivate it instead",
        )

    db.delete(sku)
    db.commit()
    return DeletedResponse(id=str(sku_id))
