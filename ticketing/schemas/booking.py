from __future__ import annotations

from typing import Annotated, Optional, List
from pydantic import BaseModel, Field, UUID4, field_validator
from decimal import Decimal
from datetime import datetime

from ticketing.utils.validation import email_error, name_error, phone_error


# Booking: Create (POST /bookings)
class BookingItem(BaseModel):
    sku_id: UUID4
    quantity: int = Field(ge=1, le=50)


class BookingCreate(BaseModel):
    time_slot_id: UUID4
    items: Annotated[List[BookingItem], Field(min_length=1, max_length=10)]
    coupon_code: Optional[str] = None
    first_name: str
    last_name: str
    email: str
    phone: str

    @field_validator("coupon_code", mode="before")
    @classmethod
    def parse_empty_str_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("first_name")
    @classmethod
    def check_first_name(cls, v: str) -> str:
        error = name_error(v, "First name")
        if error:
            raise ValueError(error)
        return v.strip()

    @field_validator("last_name")
    @classmethod
    def check_last_name(cls, v: str) -> str:
        error = name_error(v, "Last name")
        if error:
            raise ValueError(error)
        return v.strip()

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        error = email_error(v)
        if error:
            raise ValueError(error)
        return v.strip()

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: str) -> str:
        error = phone_error(v)
        if error:
            raise ValueError(error)
        return v.strip()


# Nested response objects for order responses
class BookingSKUSummary(BaseModel):
    name: str
    category: Optional[str] = None

    class Config:
        from_attributes = True


class BookingLine(BaseModel):
    id: UUID4
    sku_id: UUID4
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    discount_amount: Decimal
    total_price: Decimal
    status: str
    sku: Optional[BookingSKUSummary] = None

    class Config:
        from_attributes = True


# Order: Full response (POST /bookings, GET /bookings/{id})
class Order(BaseModel):
    id: UUID4
    order_number: str
    event_id: UUID4
    time_slot_id: UUID4
    status: str
    subtotal: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    coupon_code: Optional[str] = None
    visitor_name: str
    visitor_email: str
    visitor_phone: str
    qr_payload: Optional[str] = None
    expires_at: datetime
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancel_reason: Optional[str] = None
    checked_in_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    bookings: List[BookingLine] = []

    class Config:
        from_attributes = True


# Payment: Start (POST /bookings/{id}/payment)
class PaymentStartRequest(BaseModel):
    redirect_url: Optional[str] = None


class PaymentStartResponse(BaseModel):
    order_id: UUID4
    merchant_order_id: str
    redirect_url: str
    amount_paise: int


# Order: Confirm / Cancel responses
class OrderTransitionResponse(BaseModel):
    changed: bool
    order: Order


class OrderCancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=100)


# Order: Admin expiry sweep (POST /admin/bookings/expire)
class ExpireResponse(BaseModel):
    expired: int
