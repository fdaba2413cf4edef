"""
Order pricing and discount allocation.

A checkout is persisted as one Booking row per SKU, so an approved
whole-order discount has to be spread across the lines. Each line gets the
share of the discount that matches its share of the subtotal; the cents left
over by rounding go to the lines with the largest remainders so the line
totals always add up to `subtotal - discount` exactly.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP
from typing import List, Sequence
from uuid import UUID

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def round_money(value) -> Decimal:
    """Round to two places, half-up. Only used at the money boundary."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LineItem:
    sku_id: UUID
    quantity: int
    unit_price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class AllocatedLine:
    sku_id: UUID
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    discount_amount: Decimal
    total_price: Decimal


@dataclass(frozen=True)
class OrderTotals:
    lines: List[AllocatedLine]
    subtotal: Decimal
    discount_amount: Decimal
    total_amount: Decimal


def order_subtotal(items: Sequence[LineItem]) -> Decimal:
    return round_money(sum((item.subtotal for item in items), ZERO))


def allocate_discount(items: Sequence[LineItem], discount_amount) -> OrderTotals:
    """Split `discount_amount` across `items` proportionally to line subtotals."""
    discount = round_money(discount_amount)
    if discount < 0:
        raise ValueError("discount_amount cannot be negative")

    subtotals = [round_money(item.subtotal) for item in items]
    subtotal = sum(subtotals, ZERO)
    discount = min(discount, subtotal)

    if subtotal > 0:
        raw_shares = [line_subtotal * discount / subtotal for line_subtotal in subtotals]
    else:
        raw_shares = [ZERO for _ in subtotals]

    # Floor every share to the cent, then hand out the missing cents
    shares = [share.quantize(CENT, rounding=ROUND_DOWN) for share in raw_shares]
    leftover_cents = int((discount - sum(shares, ZERO)) / CENT)
    by_remainder = sorted(
        range(len(shares)),
        key=lambda i: (raw_shares[i] - shares[i], subtotals[i]),
        reverse=True,
    )
    for i in by_remainder[:leftover_cents]:
        shares[i] += CENT

    lines = [
        AllocatedLine(
            sku_id=item.sku_id,
            quantity=item.quantity,
            unit_price=round_money(item.unit_price),
            subtotal=line_subtotal,
            discount_amount=share,
            total_price=line_subtotal - share,
        )
        for item, line_subtotal, share in zip(items, subtotals, shares)
    ]

    return OrderTotals(
        lines=lines,
        subtotal=subtotal,
        discount_amount=discount,
        total_amount=max(ZERO, subtotal - discount),
    )
