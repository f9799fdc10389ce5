"""
Admin dashboard stats and demo data maintenance.
"""

from fastapi import APIRouter, Depends

from backend.app.core.guards import require_admin
from backend.app.db.state import ShippingState, get_state
from backend.app.schemas.common import ok
from backend.app.services.seed import reseed

router = APIRouter(prefix="/admin", tags=["Admin - Dashboard"])

RECENT_PACKAGES = 10


@router.get("/stats")
async def dashboard_stats(
    current_user: dict = Depends(require_admin),
    state: ShippingState = Depends(get_state)
):
    packages = sorted(state.store.list_packages(), key=lambda p: p.created_at, reverse=True)
    return ok({
        "stats": state.stats().to_wire(),
        "recentPackages": [p.to_wire() for p in packages[:RECENT_PACKAGES]],
        "counts": state.store.counts(),
    })


@router.post("/seed")
async def reseed_demo_data(
    current_user: dict = Depends(require_admin),
    state: ShippingState = Depends(get_state)
):
    """Wipe the store and load the demo data again."""
    seeded = reseed(state)
    return ok(seeded, message="Demo data seeded")
