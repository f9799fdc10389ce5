"""
Admin activity feed.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from backend.app.core.guards import require_admin
from backend.app.db.state import ShippingState, get_state
from backend.app.schemas.common import listing

router = APIRouter(prefix="/admin/activities", tags=["Admin - Activities"])


@router.get("")
async def list_activities(
    tracking_number: Optional[str] = Query(None, alias="trackingNumber"),
    limit: int = Query(50, ge=1, le=1000),
    current_user: dict = Depends(require_admin),
    state: ShippingState = Depends(get_state)
):
    """
    Activity history.

    With ``trackingNumber`` the full history of that package is returned,
    oldest first; otherwise the most recent ``limit`` activities overall.
    """
    if tracking_number:
        return listing(state.store.list_activities_for(tracking_number), limit=limit)
    activities = state.store.recent_activities(limit)
    return listing(activities, total=len(state.store.list_activities()))
