from typing import Optional
from pydantic import BaseModel, Field, UUID4, field_validator
from decimal import Decimal
from datetime import date, datetime

from ticketing.models.coupon import DiscountType


# Coupon: Validate (POST /coupons/validate)
class CouponValidateRequest(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    event_id: Optional[UUID4] = None
    order_total: Decimal = Field(gt=0)

    @field_validator("event_id", mode="before")
    @classmethod
    def parse_empty_str_to_none(cls, v):
        if v == "":
            return None
        return v


class CouponSummary(BaseModel):
    code: str
    discount_type: DiscountType
    discount_value: Decimal


class CouponValidateResponse(BaseModel):
    valid: bool
    error_message: Optional[str] = None
    discount_amount: Optional[Decimal] = None
    final_total: Optional[Decimal] = None
    coupon: Optional[CouponSummary] = None


# Coupon: Create (POST /admin/coupons)
class CouponCreate(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    event_id: Optional[UUID4] = None
    discount_type: str
    discount_value: Decimal
    min_order_amount: Optional[Decimal] = Field(None, ge=0)
    max_discount: Optional[Decimal] = Field(None, gt=0)
    usage_limit: Optional[int] = Field(None, ge=1)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool = True

    @field_validator("event_id", "start_date", "end_date", mode="before")
    @classmethod
    def parse_empty_str_to_none(cls, v):
        if v == "":
            return None
        return v


# Coupon: Update (PATCH /admin/coupons/{id}); only fields sent are applied
class CouponUpdate(BaseModel):
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    event_id: Optional[UUID4] = None
    discount_type: Optional[str] = None
    discount_value: Optional[Decimal] = None
    min_order_amount: Optional[Decimal] = Field(None, ge=0)
    max_discount: Optional[Decimal] = Field(None, gt=0)
    usage_limit: Optional[int] = Field(None, ge=1)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: Optional[bool] = None

    @field_validator("event_id", "start_date", "end_date", mode="before")
    @classmethod
    def parse_empty_str_to_none(cls, v):
        if v == "":
            return None
        return v


class Coupon(BaseModel):
    id: UUID4
    code: str
    event_id: Optional[UUID4] = None
    discount_type: DiscountType
    discount_value: Decimal
    min_order_amount: Optional[Decimal] = None
    max_discount: Optional[Decimal] = None
    usage_limit: Optional[int] = None
    used_count: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
