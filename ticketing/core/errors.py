"""Domain errors raised by the booking engine.

Routes translate these into HTTP responses; nothing here knows about HTTP.
"""

from enum import Enum


class ErrorCode(str, Enum):
    VALIDATION_FAILED = "validation_failed"
    NOT_FOUND = "not_found"
    INSUFFICIENT_INVENTORY = "insufficient_inventory"
    COUPON_INVALID = "coupon_invalid"
    PAYMENT_NOT_COMPLETED = "payment_not_completed"
    INVALID_ORDER_STATE = "invalid_order_state"
    CONFLICT = "conflict"


class DomainError(Exception):
    """Base domain error with a code and a user-safe message."""

    code = ErrorCode.VALIDATION_FAILED

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationFailedError(DomainError):
    code = ErrorCode.VALIDATION_FAILED


class NotFoundError(DomainError):
    code = ErrorCode.NOT_FOUND


class ConflictError(DomainError):
    code = ErrorCode.CONFLICT


class InsufficientInventoryError(DomainError):
    """Not enough tickets left for one line of a checkout."""

    code = ErrorCode.INSUFFICIENT_INVENTORY

    def __init__(self, sku_id, requested: int, available: int) -> None:
        super().__init__("Not enough tickets available")
        self.sku_id = sku_id
        self.requested = requested
        self.available = available


class CouponInvalidError(DomainError):
    code = ErrorCode.COUPON_INVALID

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class PaymentNotCompletedError(DomainError):
    code = ErrorCode.PAYMENT_NOT_COMPLETED

    def __init__(self, payment_status: str) -> None:
        super().__init__(f"Payment not completed (status: {payment_status})")
        self.payment_status = payment_status


class OrderStateError(DomainError):
    code = ErrorCode.INVALID_ORDER_STATE
