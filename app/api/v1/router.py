"""
API router setup
Organized into: public, dashboard (JWT) and admin routes
"""
from fastapi import APIRouter

from app.api.v1.public import hosts, booking_session, loomia, config as public_config
from app.api.v1.dashboard import availability, pricing, payments, bookings, video_call
from app.api.v1.admin import config as admin_config

api_v1_router = APIRouter()

# ============================================================================
# PUBLIC ROUTES (No authentication required)
# ============================================================================
api_v1_router.include_router(hosts.router, tags=["Public"])
api_v1_router.include_router(booking_session.router, tags=["Booking"])
api_v1_router.include_router(loomia.router, tags=["Loomia"])
api_v1_router.include_router(public_config.router, tags=["Public"])

# ============================================================================
# DASHBOARD ROUTES (JWT authentication required)
# ============================================================================
api_v1_router.include_router(availability.router, tags=["Host"])
api_v1_router.include_router(pricing.router, tags=["Host"])
api_v1_router.include_router(payments.router, tags=["Payments"])
api_v1_router.include_router(bookings.router, tags=["Bookings"])
api_v1_router.include_router(video_call.router, tags=["Video"])

# ============================================================================
# ADMIN ROUTES (JWT authentication + admin role required)
# ============================================================================
api_v1_router.include_router(admin_config.router, tags=["Admin"])


@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """
    API information, grouped by authentication type.
    """
    return {
        "version": "1.0",
        "authentication": {
            "public": "No authentication required",
            "dashboard": "Supabase Bearer token required",
            "admin": "Supabase Bearer token + admin role required"
        }
    }
