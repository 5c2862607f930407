from fastapi import APIRouter

# Public: bookings
from app.api.v1.public.bookings import router as bookings_router

# Public: promotion / voucher previews
from app.api.v1.public.offers import promotion_router, voucher_router

# Public: user profile & notifications
from app.api.v1.public.me import router as me_router

# Admin
from app.api.v1.admin.bookings import router as admin_bookings_router, location_bookings_router
from app.api.v1.admin.promotions import router as admin_promotions_router
from app.api.v1.admin.locations import router as admin_locations_router
from app.api.v1.admin.notifications import router as admin_notifications_router

api_router = APIRouter()

# --- Public: bookings ---
api_router.include_router(bookings_router)

# --- Public: offers ---
api_router.include_router(promotion_router)
api_router.include_router(voucher_router)

# --- Public: profile & notifications ---
api_router.include_router(me_router)

# --- Admin ---
api_router.include_router(admin_bookings_router)
api_router.include_router(location_bookings_router)
api_router.include_router(admin_promotions_router)
api_router.include_router(admin_locations_router)
api_router.include_router(admin_notifications_router)
