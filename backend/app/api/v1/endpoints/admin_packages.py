"""
Admin package API: list packages and drive their status.

Actions:
    update_status  {trackingNumber, newStatus, reason?, location?}
    add_event      {trackingNumber, description, location}
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from backend.app.core.exceptions import ResourceNotFoundError, ValidationError
from backend.app.core.guards import require_admin
from backend.app.db.state import ShippingState, get_state
from backend.app.schemas.common import ok, parse_payload, split_action
from backend.app.schemas.package import PackageEventRequest, StatusUpdateRequest

router = APIRouter(prefix="/admin/packages", tags=["Admin - Packages"])


@router.get("")
async def list_packages(
    current_user: dict = Depends(require_admin),
    state: ShippingState = Depends(get_state)
):
    """All packages with the current dashboard stats."""
    packages = state.store.list_packages()
    return ok({
        "packages": [p.to_wire() for p in packages],
        "stats": state.stats().to_wire(),
        "totalCount": len(packages),
    })


@router.post("")
async def package_action(
    payload: Dict[str, Any] = Body(...),
    current_user: dict = Depends(require_admin),
    state: ShippingState = Depends(get_state)
):
    action, _, data = split_action(payload)

    if action == "update_status":
        req = parse_payload(StatusUpdateRequest, data)
        updated = state.engine.update_status(
            req.tracking_number,
            req.new_status,
            reason=req.reason,
            actor=current_user["user_id"],
            location=req.location,
        )
        if not updated:
            raise ResourceNotFoundError("Package", req.tracking_number)
        return ok(
            {"trackingNumber": req.tracking_number, "newStatus": req.new_status.value},
            message="Package status updated",
        )

    if action == "add_event":
        req = parse_payload(PackageEventRequest, data)
        added = state.engine.add_event(
            req.tracking_number, req.description, req.location, actor=current_user["user_id"]
        )
        if not added:
            raise ResourceNotFoundError("Package", req.tracking_number)
        return ok({"trackingNumber": req.tracking_number}, message="Event added to package")

    raise ValidationError(f"Unknown action: {action}")
