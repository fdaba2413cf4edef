from typing import Optional, List
from pydantic import BaseModel, Field, UUID4
from datetime import datetime


# Scanner: Check-in (POST /admin/scanner/check-in)
class CheckInRequest(BaseModel):
    qr_data: str = Field(min_length=1)
    event_id: Optional[UUID4] = None


class ScannedTicket(BaseModel):
    ticket_type: str
    quantity: int


class CheckInResponse(BaseModel):
    status: str  # valid, invalid, used, expired, wrong_event
    message: str
    order_id: Optional[UUID4] = None
    order_number: Optional[str] = None
    visitor_name: Optional[str] = None
    tickets: List[ScannedTicket] = []
    checked_in_at: Optional[datetime] = None


# Auth: staff token (POST /admin/auth/token)
class StaffTokenRequest(BaseModel):
    secret: str
    role: str = Field("admin", pattern="^(admin|scanner)$")


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: str
