from uuid import UUID
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ticketing.db.session import get_db
from ticketing.api.deps import get_current_admin
from ticketing.models.coupon import Coupon, DiscountType
from ticketing.models.event import Event
from ticketing.schemas.common import DeletedResponse
from ticketing.schemas.coupon import Coupon as CouponSchema, CouponCreate, CouponUpdate
from ticketing.utils.coupons import normalize_code

router = APIRouter(prefix="/admin/coupons", tags=["Admin - Coupons"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_coupon(db: Session, coupon_id: UUID) -> Coupon:
    coupon = db.query(Coupon).filter(Coupon.id == coupon_id).first()
    if not coupon:
        raise HTTPException(status_code=404, detail="Coupon not found")
    return coupon


def _check_coupon_fields(db: Session, fields: dict, exclude_id: Optional[UUID] = None) -> dict:
    """
    Normalise and validate coupon fields before they are written.
    `fields` holds the coupon's full resulting state.
    """
    code = normalize_code(fields.get("code") or "")
    if not code:
        raise HTTPException(status_code=400, detail="Coupon code is required")
    query = db.query(Coupon).filter(Coupon.code == code)
    if exclude_id:
        query = query.filter(Coupon.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=400, detail="Coupon code already exists")
    fields["code"] = code

    try:
        discount_type = DiscountType(fields.get("discount_type"))
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail="discount_type must be 'percentage' or 'fixed_amount'",
        )
    fields["discount_type"] = discount_type

    value = fields.get("discount_value")
    if value is None or value <= 0:
        raise HTTPException(status_code=400, detail="discount_value must be greater than 0")
    if discount_type == DiscountType.percentage and value > 100:
        raise HTTPException(status_code=400, detail="Percentage discount cannot exceed 100")
    if discount_type == DiscountType.fixed_amount and fields.get("max_discount") is not None:
        raise HTTPException(status_code=400, detail="max_discount applies to percentage coupons only")

    usage_limit = fields.get("usage_limit")
    if usage_limit is not None and usage_limit < 1:
        raise HTTPException(status_code=400, detail="usage_limit must be at least 1")

    start, end = fields.get("start_date"), fields.get("end_date")
    if start and end and end < start:
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")

    event_id = fields.get("event_id")
    if event_id and not db.query(Event).filter(Event.id == event_id).first():
        raise HTTPException(status_code=404, detail="Event not found")

    return fields


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


@router.get("/", response_model=List[CouponSchema])
def list_coupons(
    is_active: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    query = db.query(Coupon)
    if is_active is not None:
        query = query.filter(Coupon.is_active == is_active)
    return query.order_by(Coupon.created_at.desc()).all()


@router.post("/", response_model=CouponSchema, status_code=status.HTTP_201_CREATED)
def create_coupon(
    data: CouponCreate,
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    fields = _check_coupon_fields(db, data.model_dump())
    coupon = Coupon(**fields, used_count=0)
    db.add(coupon)
    db.commit()
    db.refresh(coupon)
    return coupon


@router.patch("/{coupon_id}", response_model=CouponSchema)
def update_coupon(
    coupon_id: UUID,
    data: CouponUpdate,
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    """Partial update. `used_count` is never editable."""
    coupon = _get_coupon(db, coupon_id)
    current = {
        "code": coupon.code,
        "event_id": coupon.event_id,
        "discount_type": coupon.discount_type.value,
        "discount_value": coupon.discount_value,
        "min_order_amount": coupon.min_order_amount,
        "max_discount": coupon.max_discount,
        "usage_limit": coupon.usage_limit,
        "start_date": coupon.start_date,
        "end_date": coupon.end_date,
        "is_active": coupon.is_active,
    }
    updates = data.model_dump(exclude_unset=True)
    # Required columns cannot be cleared
    for field in ("code", "discount_type", "discount_value", "is_active"):
        if updates.get(field, 0) is None:
            del updates[field]
    current.update(updates)
    if current["usage_limit"] is not None and current["usage_limit"] < coupon.used_count:
        raise HTTPException(
            status_code=400,
            detail=f"usage_limit cannot be below the {coupon.used_count} use(s) already made",
        )
    fields = _check_coupon_fields(db, current, exclude_id=coupon.id)

    for field, value in fields.items():
        setattr(coupon, field, value)
    db.commit()
    db.refresh(coupon)
    return coupon


@router.delete("/{coupon_id}", response_model=DeletedResponse)
def delete_coupon(
    coupon_id: UUID,
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    """Orders keep the code they were placed with."""
    coupon = _get_coupon(db, coupon_id)
    db.delete(coupon)
    db.commit()
    return DeletedResponse(id=str(coupon_id))
