"""
Shared schema helpers: payload validation and response envelopes.

Every endpoint answers ``{success, data, message?}``; list endpoints add
``total``.
"""

from typing import Any, Dict, Iterable, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from backend.app.core.exceptions import ValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def parse_payload(schema: Type[SchemaT], data: Dict[str, Any]) -> SchemaT:
    """Validate an action payload, turning pydantic errors into a 400."""
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        missing = [".".join(str(p) for p in err["loc"]) for err in exc.errors() if err["type"] == "missing"]
        message = f"Missing required fields: {', '.join(missing)}" if missing else "Invalid request payload"
        raise ValidationError(message, details={"errors": exc.errors(include_url=False, include_context=False)})


def wire(entity: Any) -> Any:
    return entity.to_wire() if hasattr(entity, "to_wire") else entity


def ok(data: Any = None, message: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = wire(data)
    if message:
        body["message"] = message
    body.update(extra)
    return body


def listing(items: Iterable[Any], limit: Optional[int] = None, **extra: Any) -> Dict[str, Any]:
    """List envelope. ``total`` counts matches before ``limit`` is applied."""
    items = list(items)
    total = len(items)
    if limit is not None:
        items = items[:limit]
    return {"success": True, "data": [wire(i) for i in items], "total": total, **extra}


def split_action(payload: Dict[str, Any]):
    """Split an action body ``{action, id?, ...fields}`` into its parts."""
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    data = dict(payload)
    action = data.pop("action", None)
    if not action:
        raise ValidationError("Missing required fields: action")
    entity_id = data.pop("id", None)
    return action, entity_id, data


def require_id(entity_id: Optional[str], resource: str) -> str:
    if not entity_id:
        raise ValidationError(f"{resource} ID required")
    return entity_id
