from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ticketing.db.session import get_db
from ticketing.schemas.coupon import CouponSummary, CouponValidateRequest, CouponValidateResponse
from ticketing.utils.coupons import validate_coupon

router = APIRouter(prefix="/coupons", tags=["Coupons"])


@router.post("/validate", response_model=CouponValidateResponse)
def validate(data: CouponValidateRequest, db: Session = Depends(get_db)):
    """
    Preview a coupon against a cart total. Always answers 200; an unusable
    coupon comes back with `valid: false` and the reason to show the visitor.
    Nothing is consumed.
    """
    today = datetime.now(timezone.utc).date()
    verdict = validate_coupon(db, data.code, data.event_id, data.order_total, today)
    if not verdict.valid:
        return CouponValidateResponse(valid=False, error_message=verdict.reason)

    coupon = verdict.coupon
    return CouponValidateResponse(
        valid=True,
        discount_amount=verdict.discount_amount,
        final_total=verdict.final_total,
        coupon=CouponSummary(
            code=coupon.code,
            discount_type=coupon.discount_type,
            discount_value=coupon.discount_value,
        ),
    )
