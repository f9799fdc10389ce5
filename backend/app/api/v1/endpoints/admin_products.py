"""
Admin product API.

Actions: create, update, delete.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from backend.app.core.exceptions import ResourceNotFoundError, ValidationError
from backend.app.core.guards import require_admin
from backend.app.db.state import ShippingState, get_state
from backend.app.schemas.common import listing, ok, parse_payload, require_id, split_action
from backend.app.schemas.product import ProductCreate, ProductUpdate

router = APIRouter(prefix="/admin/products", tags=["Admin - Products"])


@router.get("")
async def list_products(
    q: Optional[str] = Query(None, description="Search name, SKU or category"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    current_user: dict = Depends(require_admin),
    state: ShippingState = Depends(get_state)
):
    products = state.store.search_products(q) if q else state.store.list_products()
    return listing(products, limit=limit)


@router.post("")
async def product_action(
    payload: Dict[str, Any] = Body(...),
    current_user: dict = Depends(require_admin),
    state: ShippingState = Depends(get_state)
):
    action, entity_id, data = split_action(payload)

    if action == "create":
        req = parse_payload(ProductCreate, data)
        product = state.catalog.create_product(req.model_dump(), actor=current_user["user_id"])
        return ok(product, message="Product created successfully")

    if action == "update":
        product_id = require_id(entity_id, "Product")
        req = parse_payload(ProductUpdate, data)
        product = state.catalog.update_product(product_id, req.model_dump(exclude_unset=True))
        if product is None:
            raise ResourceNotFoundError("Product", product_id)
        return ok(product, message="Product updated successfully")

    if action == "delete":
        product_id = require_id(entity_id, "Product")
        if not state.catalog.delete_product(product_id):
            raise ResourceNotFoundError("Product", product_id)
        return ok(message="Product deleted successfully")

    raise ValidationError(f"Unknown action: {action}")
