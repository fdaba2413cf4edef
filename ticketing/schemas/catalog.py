from typing import Optional, List
from pydantic import BaseModel, Field, UUID4, model_validator
from decimal import Decimal
from datetime import date, time


# Event: Create (POST /admin/events)
class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    venue: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_range(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class Event(BaseModel):
    id: UUID4
    title: str
    description: Optional[str] = None
    venue: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    class Config:
        from_attributes = True


# Event date: Create / Toggle
class EventDateCreate(BaseModel):
    event_id: UUID4
    date: date


class EventDateUpdate(BaseModel):
    is_available: bool


class EventDate(BaseModel):
    id: UUID4
    event_id: UUID4
    date: date
    is_available: bool

    class Config:
        from_attributes = True


# Time slot: Create (POST /admin/time-slots)
class TimeSlotCreate(BaseModel):
    event_date_id: UUID4
    start_time: time
    end_time: time
    capacity: int = Field(gt=0)

    @model_validator(mode="after")
    def check_times(self):
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class TimeSlot(BaseModel):
    id: UUID4
    event_date_id: UUID4
    start_time: time
    end_time: time
    capacity: int

    class Config:
        from_attributes = True


# SKU: Create / Update
class SKUCreate(BaseModel):
    event_id: UUID4
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    base_price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    category: Optional[str] = None


class SKUUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    base_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    category: Optional[str] = None
    is_active: Optional[bool] = None


class SKU(BaseModel):
    id: UUID4
    event_id: UUID4
    name: str
    description: Optional[str] = None
    base_price: Decimal
    category: Optional[str] = None
    is_active: bool

    class Config:
        from_attributes = True


# Availability: per SKU for one time slot (storefront ticket picker)
class SKUAvailability(BaseModel):
    sku_id: UUID4
    name: str
    category: Optional[str] = None
    base_price: Decimal
    available_quantity: int


class TimeSlotAvailability(TimeSlot):
    skus: List[SKUAvailability] = []


class SlotAvailabilityResponse(BaseModel):
    time_slot_id: UUID4
    date: date
    start_time: time
    end_time: time
    skus: List[SKUAvailability]
