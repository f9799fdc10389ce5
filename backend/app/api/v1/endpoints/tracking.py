"""
Public tracking lookup.
"""

from fastapi import APIRouter, Depends

from backend.app.core.exceptions import ResourceNotFoundError
from backend.app.db.state import ShippingState, get_state
from backend.app.schemas.common import ok

router = APIRouter(prefix="/tracking", tags=["Tracking"])


@router.get("/{tracking_number}")
async def track_package(tracking_number: str, state: ShippingState = Depends(get_state)):
    """Package and its activity history for a tracking number. No auth required."""
    package = state.store.get_package_by_tracking_number(tracking_number.strip().upper())
    if package is None:
        raise ResourceNotFoundError("Package", tracking_number)
    activities = state.store.list_activities_for(package.tracking_number)
    return ok({
        "package": package.to_wire(),
        "activities": [a.to_wire() for a in activities],
    })
