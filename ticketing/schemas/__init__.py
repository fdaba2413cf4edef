from ticketing.schemas.common import (
    PaginatedResponse, ErrorResponse, DeletedResponse,
)
from ticketing.schemas.catalog import (
    Event, EventCreate, EventDate, EventDateCreate, EventDateUpdate,
    TimeSlot, TimeSlotCreate, SKU, SKUCreate, SKUUpdate,
    SKUAvailability, SlotAvailabilityResponse,
)
from ticketing.schemas.inventory import (
    InventoryRecord, InventoryCreate, InventoryUpdate,
    InventoryProvisionAll, InventoryProvisionResult,
)
from ticketing.schemas.coupon import (
    Coupon, CouponCreate, CouponUpdate, CouponSummary,
    CouponValidateRequest, CouponValidateResponse,
)
from ticketing.schemas.booking import (
    BookingCreate, BookingItem, BookingLine, Order,
    PaymentStartRequest, PaymentStartResponse,
    OrderTransitionResponse, OrderCancelRequest, ExpireResponse,
)
from ticketing.schemas.scanner import (
    CheckInRequest, CheckInResponse, ScannedTicket, StaffTokenRequest, Token,
)
