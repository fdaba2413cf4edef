from fastapi import APIRouter

# Public: catalog, coupons, checkout
from ticketing.api.v1.public.catalog import router as catalog_router
from ticketing.api.v1.public.coupons import router as coupons_router
from ticketing.api.v1.public.bookings import router as bookings_router

# Admin
from ticketing.api.v1.admin.auth import router as admin_auth_router
from ticketing.api.v1.admin.events import router as admin_events_router
from ticketing.api.v1.admin.dates import router as admin_dates_router
from ticketing.api.v1.admin.time_slots import router as admin_time_slots_router
from ticketing.api.v1.admin.skus import router as admin_skus_router
from ticketing.api.v1.admin.inventory import router as admin_inventory_router
from ticketing.api.v1.admin.coupons import router as admin_coupons_router
from ticketing.api.v1.admin.bookings import router as admin_bookings_router
from ticketing.api.v1.admin.scanner import router as admin_scanner_router

api_router = APIRouter()

# --- Public ---
api_router.include_router(catalog_router)
api_router.include_router(coupons_router)
api_router.include_router(bookings_router)

# --- Admin ---
api_router.include_router(admin_auth_router)
api_router.include_router(admin_events_router)
api_router.include_router(admin_dates_router)
api_router.include_router(admin_time_slots_router)
api_router.include_router(admin_skus_router)
api_router.include_router(admin_inventory_router)
api_router.include_router(admin_coupons_router)
api_router.include_router(admin_bookings_router)
api_router.include_router(admin_scanner_router)
