from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ticketing.db.session import get_db
from ticketing.api.deps import get_current_staff
from ticketing.schemas.scanner import CheckInRequest, CheckInResponse, ScannedTicket
from ticketing.utils.checkin import check_in

router = APIRouter(prefix="/admin/scanner", tags=["Admin - Scanner"])


@router.post("/check-in", response_model=CheckInResponse)
def scan_ticket(
    data: CheckInRequest,
    db: Session = Depends(get_db),
    staff: dict = Depends(get_current_staff),
):
    """
    Validate a scanned QR code at the gate. Always answers 200; `status`
    tells the operator whether to admit the visitor.
    """
    result = check_in(db, data.qr_data, event_id=data.event_id)
    order = result.order
    if order is None:
        return CheckInResponse(status=result.status, message=result.message)

    return CheckInResponse(
        status=result.status,
        message=result.message,
        order_id=order.id,
        order_number=order.order_number,
        visitor_name=order.visitor_name,
        tickets=[
            ScannedTicket(ticket_type=b.sku.name if b.sku else "Ticket", quantity=b.quantity)
            for b in order.bookings
        ],
        checked_in_at=order.checked_in_at,
    )
