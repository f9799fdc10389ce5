"""
Admin location API.

Actions: create, update, delete.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from backend.app.core.exceptions import ResourceNotFoundError, ValidationError
from backend.app.core.guards import require_admin
from backend.app.db.state import ShippingState, get_state
from backend.app.models.shipment_enums import LocationType
from backend.app.schemas.common import listing, ok, parse_payload, require_id, split_action
from backend.app.schemas.location import LocationCreate, LocationUpdate

router = APIRouter(prefix="/admin/locations", tags=["Admin - Locations"])


@router.get("")
async def list_locations(
    q: Optional[str] = Query(None, description="Search name, city or state"),
    type: Optional[LocationType] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    current_user: dict = Depends(require_admin),
    state: ShippingState = Depends(get_state)
):
    store = state.store
    if q:
        locations = store.search_locations(q)
        if type:
            locations = [loc for loc in locations if loc.type == type]
    elif type:
        locations = store.list_locations_by_type(type)
    else:
        locations = store.list_locations()
    return listing(locations, limit=limit)


@router.get("/{location_id}")
async def get_location(
    location_id: str,
    current_user: dict = Depends(require_admin),
    state: ShippingState = Depends(get_state)
):
    location = state.store.get_location_by_id(location_id)
    if location is None:
        raise ResourceNotFoundError("Location", location_id)
    return ok(location)


@router.post("")
async def location_action(
    payload: Dict[str, Any] = Body(...),
    current_user: dict = Depends(require_admin),
    state: ShippingState = Depends(get_state)
):
    action, entity_id, data = split_action(payload)

    if action == "create":
        req = parse_payload(LocationCreate, data)
        location = state.catalog.create_location(req.model_dump(), actor=current_user["user_id"])
        return ok(location, message="Location created successfully")

    if action == "update":
        location_id = require_id(entity_id, "Location")
        req = parse_payload(LocationUpdate, data)
        location = state.catalog.update_location(location_id, req.model_dump(exclude_unset=True))
        if location is None:
            raise ResourceNotFoundError("Location", location_id)
        return ok(location, message="Location updated successfully")

    if action == "delete":
        location_id = require_id(entity_id, "Location")
        if not state.catalog.delete_location(location_id):
            raise ResourceNotFoundError("Location", location_id)
        return ok(message="Location deleted successfully")

    raise ValidationError(f"Unknown action: {action}")
