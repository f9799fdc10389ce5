"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from backend.app.api.v1.endpoints import (
    auth, tracking,
    admin_packages, admin_tracking_numbers,
    admin_locations, admin_products,
    admin_activities, admin_stats, admin_realtime
)

router = APIRouter()

# Authentication endpoints
router.include_router(auth.router)

# Public tracking lookup
router.include_router(tracking.router)

# Admin console
router.include_router(admin_packages.router)
router.include_router(admin_tracking_numbers.router)
router.include_router(admin_locations.router)
router.include_router(admin_products.router)
router.include_router(admin_activities.router)
router.include_router(admin_stats.router)

# Admin push stream
router.include_router(admin_realtime.router)
