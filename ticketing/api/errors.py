from fastapi import HTTPException, status

from ticketing.core.errors import DomainError, ErrorCode, InsufficientInventoryError

STATUS_BY_CODE = {
    ErrorCode.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INSUFFICIENT_INVENTORY: status.HTTP_409_CONFLICT,
    ErrorCode.COUPON_INVALID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PAYMENT_NOT_COMPLETED: status.HTTP_402_PAYMENT_REQUIRED,
    ErrorCode.INVALID_ORDER_STATE: status.HTTP_409_CONFLICT,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
}


def http_error(exc: DomainError) -> HTTPException:
    """Translate a booking-engine error into the HTTPException a route raises."""
    if isinstance(exc, InsufficientInventoryError):
        detail = {
            "error": exc.code.value,
            "message": exc.message,
            "sku_id": str(exc.sku_id),
            "available": exc.available,
            "requested": exc.requested,
        }
    else:
        detail = exc.message
    return HTTPException(status_code=STATUS_BY_CODE[exc.code], detail=detail)
