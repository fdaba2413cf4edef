"""
Coupon validation and redemption.

`validate_coupon` is a pure check: it never touches `used_count`, so a
visitor who tries a code and walks away does not burn a use. The count is
bumped by `redeem_coupon`, once per confirmed order.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ticketing.models.coupon import Coupon, DiscountType
from ticketing.utils.pricing import ZERO, round_money

INVALID_CODE = "Invalid coupon code"
NOT_ACTIVE = "This coupon is not active"
WRONG_EVENT = "This coupon is not valid for this event"
NOT_YET_ACTIVE = "This coupon is not yet active"
EXPIRED = "This coupon has expired"
USAGE_LIMIT_REACHED = "This coupon has reached its usage limit"


@dataclass(frozen=True)
class CouponVerdict:
    valid: bool
    reason: Optional[str] = None
    discount_amount: Decimal = ZERO
    final_total: Decimal = ZERO
    coupon: Optional[Coupon] = None

    @classmethod
    def reject(cls, reason: str, coupon: Optional[Coupon] = None) -> "CouponVerdict":
        return cls(valid=False, reason=reason, coupon=coupon)


def normalize_code(code: str) -> str:
    return code.strip().upper()


def find_coupon(db: Session, code: str) -> Optional[Coupon]:
    """Case-insensitive exact lookup after trimming."""
    normalized = normalize_code(code)
    if not normalized:
        return None
    return db.query(Coupon).filter(func.upper(Coupon.code) == normalized).first()


def compute_discount(coupon: Coupon, subtotal: Decimal) -> Decimal:
    """Unrounded discount for `subtotal`."""
    value = Decimal(coupon.discount_value)
    if coupon.discount_type == DiscountType.percentage:
        discount = subtotal * value / 100
        if coupon.max_discount is not None:
            discount = min(discount, Decimal(coupon.max_discount))
        return discount
    return min(value, subtotal)


def _format_amount(amount) -> str:
    amount = Decimal(amount)
    if amount == amount.to_integral_value():
        return str(amount.quantize(Decimal(1)))
    return str(round_money(amount))


def validate_coupon(
    db: Session,
    code: str,
    event_id: Optional[UUID],
    order_subtotal,
    today: date,
) -> CouponVerdict:
    """
    Check a coupon against an order. Checks run in a fixed order and the
    first failure decides the reason shown to the visitor.
    """
    subtotal = Decimal(order_subtotal)

    coupon = find_coupon(db, code)
    if coupon is None:
        return CouponVerdict.reject(INVALID_CODE)

    if not coupon.is_active:
        return CouponVerdict.reject(NOT_ACTIVE, coupon)

    # A global coupon (no event) matches any event; a scoped one only rejects
    # a different, known event
    if coupon.event_id is not None and event_id is not None and coupon.event_id != event_id:
        return CouponVerdict.reject(WRONG_EVENT, coupon)

    # Calendar-date comparisons only
    if coupon.start_date is not None and today < coupon.start_date:
        return CouponVerdict.reject(NOT_YET_ACTIVE, coupon)

    if coupon.end_date is not None and today > coupon.end_date:
        return CouponVerdict.reject(EXPIRED, coupon)

    if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
        return CouponVerdict.reject(USAGE_LIMIT_REACHED, coupon)

    if coupon.min_order_amount is not None and subtotal < Decimal(coupon.min_order_amount):
        return CouponVerdict.reject(
            f"Minimum order amount of ₹{_format_amount(coupon.min_order_amount)} required",
            coupon,
        )

    discount = compute_discount(coupon, subtotal)
    final_total = max(ZERO, subtotal - discount)
    return CouponVerdict(
        valid=True,
        discount_amount=round_money(discount),
        final_total=round_money(final_total),
        coupon=coupon,
    )


def redeem_coupon(db: Session, coupon_id: UUID) -> bool:
    """
    Atomically add one use to a coupon, refusing to go past its usage limit.
    Returns False when the limit was already reached. Does not commit.
    """
    updated = (
        db.query(Coupon)
        .filter(
            Coupon.id == coupon_id,
            or_(Coupon.usage_limit.is_(None), Coupon.used_count < Coupon.usage_limit),
        )
        .update({Coupon.used_count: Coupon.used_count + 1}, synchronize_session="fetch")
    )
    return updated == 1
