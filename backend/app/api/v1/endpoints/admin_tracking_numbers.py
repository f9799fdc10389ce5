"""
Admin tracking-number API: package CRUD and manual activities.

Actions: create, update, delete, add_activity.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from backend.app.core.exceptions import ResourceNotFoundError, ValidationError
from backend.app.core.guards import require_admin
from backend.app.db.state import ShippingState, get_state
from backend.app.models.shipment_enums import PackageStatus, Priority
from backend.app.schemas.common import listing, ok, parse_payload, require_id, split_action
from backend.app.schemas.package import ActivityCreate, TrackingNumberCreate, TrackingNumberUpdate

router = APIRouter(prefix="/admin/tracking-numbers", tags=["Admin - Tracking Numbers"])


@router.get("")
async def list_tracking_numbers(
    q: Optional[str] = Query(None, description="Search tracking number, sender or recipient"),
    status: Optional[PackageStatus] = Query(None),
    priority: Optional[Priority] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    current_user: dict = Depends(require_admin),
    state: ShippingState = Depends(get_state)
):
    store = state.store
    packages = store.search_packages(q) if q else store.list_packages()
    if status:
        packages = [p for p in packages if p.status == status]
    if priority:
        packages = [p for p in packages if p.priority == priority]
    return listing(packages, limit=limit, stats=state.stats().to_wire())


@router.post("")
async def tracking_number_action(
    payload: Dict[str, Any] = Body(...),
    current_user: dict = Depends(require_admin),
    state: ShippingState = Depends(get_state)
):
    action, entity_id, data = split_action(payload)
    actor = current_user["user_id"]

    if action == "create":
        req = parse_payload(TrackingNumberCreate, data)
        package = state.engine.create_package(req.model_dump(exclude_none=True), actor=actor)
        return ok(package, message="Tracking number created successfully")

    if action == "update":
        package_id = require_id(entity_id, "Tracking number")
        req = parse_payload(TrackingNumberUpdate, data)
        package = state.engine.update_package(package_id, req.model_dump(exclude_unset=True), actor=actor)
        if package is None:
            raise ResourceNotFoundError("Tracking number", package_id)
        return ok(package, message="Tracking number updated successfully")

    if action == "delete":
        package_id = require_id(entity_id, "Tracking number")
        if not state.engine.delete_package(package_id):
            raise ResourceNotFoundError("Tracking number", package_id)
        return ok(message="Tracking number deleted successfully")

    if action == "add_activity":
        req = parse_payload(ActivityCreate, data)
        activity = state.engine.add_activity(
            req.tracking_number_id,
            description=req.description,
            location=req.location,
            activity_type=req.type,
            actor=actor,
            location_id=req.location_id,
            metadata=req.metadata,
            latitude=req.latitude,
            longitude=req.longitude,
        )
        if activity is None:
            raise ResourceNotFoundError("Tracking number", req.tracking_number_id)
        return ok(activity, message="Activity added successfully")

    raise ValidationError(f"Unknown action: {action}")
