"""
In-memory entity store for locations, products, packages and activities.

The store is the single source of truth for shipping data. It is an
explicitly constructed object: the application builds one at startup and
hands it to request handlers through dependencies; tests build their own.

Every operation holds the store lock for its full duration, so a reader
never sees a half-applied write even when handlers run on worker threads.
Entities handed out are deep copies; callers cannot mutate store state by
editing them.
"""

import secrets
import string
import threading
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError as PydanticValidationError

from backend.app.core.exceptions import ValidationError
from backend.app.models.activity import Activity
from backend.app.models.base import utc_now
from backend.app.models.location import Location
from backend.app.models.package import Package
from backend.app.models.product import Product
from backend.app.models.shipment_enums import LocationType, PackageStatus, Priority

ModelT = TypeVar("ModelT", bound=BaseModel)
EntityData = Union[Mapping[str, Any], BaseModel]

# Fields no update may overwrite
IMMUTABLE_FIELDS = frozenset({"id", "created_at", "created_by", "tracking_number"})

TRACKING_PREFIX = "SC"
_TRACKING_ALPHABET = string.ascii_uppercase + string.digits


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def generate_tracking_number() -> str:
    """``SC`` + six time-derived digits + four random characters."""
    stamp = str(int(time.time() * 1000))[-6:]
    suffix = "".join(secrets.choice(_TRACKING_ALPHABET) for _ in range(4))
    return f"{TRACKING_PREFIX}{stamp}{suffix}"


def normalize_keys(model_cls: Type[BaseModel], data: EntityData) -> Dict[str, Any]:
    """Map camelCase or snake_case input onto field names, dropping unknown keys."""
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    by_alias = {
        (field.alias or name): name for name, field in model_cls.model_fields.items()
    }
    normalized = {}
    for key, value in data.items():
        if key in model_cls.model_fields:
            normalized[key] = value
        elif key in by_alias:
            normalized[by_alias[key]] = value
    return normalized


def _validate(model_cls: Type[ModelT], values: Dict[str, Any]) -> ModelT:
    """Build an entity, reporting bad field values as a 400."""
    try:
        return model_cls.model_validate(values)
    except PydanticValidationError as exc:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
        raise ValidationError(
            f"Invalid value for: {', '.join(fields)}",
            details={"errors": exc.errors(include_url=False, include_context=False, include_input=False)}
        )


def _contains(haystack: Optional[str], needle: str) -> bool:
    return bool(haystack) and needle in haystack.lower()


class DuplicateTrackingNumberError(ValidationError):
    def __init__(self, tracking_number: str):
        super().__init__(
            message=f"Tracking number {tracking_number} already exists",
            details={"trackingNumber": tracking_number}
        )


class EntityStore:
    """Keyed in-memory collections with CRUD and linear-scan queries."""

    def __init__(self):
        self._lock = threading.RLock()
        self._locations: Dict[str, Location] = {}
        self._products: Dict[str, Product] = {}
        self._packages: Dict[str, Package] = {}
        self._tracking_index: Dict[str, str] = {}
        self._activities: List[Activity] = []

    # -- generic helpers -------------------------------------------------

    @staticmethod
    def _copy(entity: ModelT) -> ModelT:
        return entity.model_copy(deep=True)

    def _copies(self, entities: Iterable[ModelT]) -> List[ModelT]:
        return [self._copy(e) for e in entities]

    def _insert(self, collection: Dict[str, ModelT], model_cls: Type[ModelT], prefix: str, data: EntityData, **fixed) -> ModelT:
        values = normalize_keys(model_cls, data)
        for name in ("id", "created_at", "updated_at"):
            values.pop(name, None)
        now = utc_now()
        values.update(fixed)
        values.update({"id": new_id(prefix), "created_at": now, "updated_at": now})
        values.setdefault("created_by", "system")
        entity = _validate(model_cls, values)
        collection[entity.id] = entity
        return self._copy(entity)

    def _merge(self, collection: Dict[str, ModelT], entity_id: str, changes: EntityData) -> Optional[ModelT]:
        current = collection.get(entity_id)
        if current is None:
            return None
        model_cls = type(current)
        values = current.model_dump()
        updates = normalize_keys(model_cls, changes)
        for name in IMMUTABLE_FIELDS:
            updates.pop(name, None)
        values.update(updates)
        values["updated_at"] = utc_now()
        entity = _validate(model_cls, values)
        collection[entity_id] = entity
        return self._copy(entity)

    # -- locations -------------------------------------------------------

    def create_location(self, data: EntityData) -> Location:
        with self._lock:
            return self._insert(self._locations, Location, "loc", data)

    def get_location_by_id(self, location_id: str) -> Optional[Location]:
        with self._lock:
            location = self._locations.get(location_id)
            return self._copy(location) if location else None

    def update_location(self, location_id: str, changes: EntityData) -> Optional[Location]:
        with self._lock:
            return self._merge(self._locations, location_id, changes)

    def delete_location(self, location_id: str) -> bool:
        with self._lock:
            return self._locations.pop(location_id, None) is not None

    def list_locations(self) -> List[Location]:
        with self._lock:
            return self._copies(self._locations.values())

    def search_locations(self, query: str) -> List[Location]:
        q = query.lower()
        with self._lock:
            return self._copies(
                loc for loc in self._locations.values()
                if _contains(loc.name, q) or _contains(loc.address.city, q) or _contains(loc.address.state, q)
            )

    def list_locations_by_type(self, location_type: LocationType) -> List[Location]:
        with self._lock:
            return self._copies(loc for loc in self._locations.values() if loc.type == location_type)

    # -- products --------------------------------------------------------

    def create_product(self, data: EntityData) -> Product:
        with self._lock:
            return self._insert(self._products, Product, "prod", data)

    def get_product_by_id(self, product_id: str) -> Optional[Product]:
        with self._lock:
            product = self._products.get(product_id)
            return self._copy(product) if product else None

    def update_product(self, product_id: str, changes: EntityData) -> Optional[Product]:
        with self._lock:
            return self._merge(self._products, product_id, changes)

    def delete_product(self, product_id: str) -> bool:
        with self._lock:
            return self._products.pop(product_id, None) is not None

    def list_products(self) -> List[Product]:
        with self._lock:
            return self._copies(self._products.values())

    def search_products(self, query: str) -> List[Product]:
        q = query.lower()
        with self._lock:
            return self._copies(
                p for p in self._products.values()
                if _contains(p.name, q) or _contains(p.sku, q) or _contains(p.category, q)
            )

    # -- packages --------------------------------------------------------

    def create_package(self, data: EntityData) -> Package:
        """Insert a package, generating a tracking number when none is given."""
        with self._lock:
            values = normalize_keys(Package, data)
            tracking_number = values.get("tracking_number")
            if tracking_number:
                if tracking_number in self._tracking_index:
                    raise DuplicateTrackingNumberError(tracking_number)
            else:
                tracking_number = generate_tracking_number()
                while tracking_number in self._tracking_index:
                    tracking_number = generate_tracking_number()
            package = self._insert(self._packages, Package, "pkg", values, tracking_number=tracking_number)
            self._tracking_index[tracking_number] = package.id
            return package

    def get_package_by_id(self, package_id: str) -> Optional[Package]:
        with self._lock:
            package = self._packages.get(package_id)
            return self._copy(package) if package else None

    def get_package_by_tracking_number(self, tracking_number: str) -> Optional[Package]:
        with self._lock:
            package_id = self._tracking_index.get(tracking_number)
            if package_id is None:
                return None
            return self._copy(self._packages[package_id])

    def update_package(self, package_id: str, changes: EntityData) -> Optional[Package]:
        with self._lock:
            return self._merge(self._packages, package_id, changes)

    def delete_package(self, package_id: str) -> bool:
        with self._lock:
            package = self._packages.pop(package_id, None)
            if package is None:
                return False
            self._tracking_index.pop(package.tracking_number, None)
            return True

    def list_packages(self) -> List[Package]:
        with self._lock:
            return self._copies(self._packages.values())

    def search_packages(self, query: str) -> List[Package]:
        q = query.lower()
        with self._lock:
            return self._copies(
                p for p in self._packages.values()
                if _contains(p.tracking_number, q) or _contains(p.recipient_name, q) or _contains(p.sender_name, q)
            )

    def list_packages_by_status(self, status: PackageStatus) -> List[Package]:
        with self._lock:
            return self._copies(p for p in self._packages.values() if p.status == status)

    def list_packages_by_priority(self, priority: Priority) -> List[Package]:
        with self._lock:
            return self._copies(p for p in self._packages.values() if p.priority == priority)

    def list_delivered_today(self, now: Optional[datetime] = None) -> List[Package]:
        now = now or utc_now()
        midnight = now.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
        with self._lock:
            return self._copies(
                p for p in self._packages.values()
                if p.status == PackageStatus.DELIVERED
                and p.actual_delivery_date is not None
                and p.actual_delivery_date >= midnight
            )

    def list_exceptions(self) -> List[Package]:
        return self.list_packages_by_status(PackageStatus.EXCEPTION)

    # -- activities ------------------------------------------------------

    def append_activity(self, data: EntityData) -> Activity:
        """Append an immutable history record; the id is always assigned here."""
        values = normalize_keys(Activity, data)
        values["id"] = new_id("act")
        values.setdefault("timestamp", utc_now())
        activity = _validate(Activity, values)
        with self._lock:
            self._activities.append(activity)
        return self._copy(activity)

    def list_activities(self) -> List[Activity]:
        with self._lock:
            return self._copies(self._activities)

    def list_activities_for(self, tracking_number: str) -> List[Activity]:
        with self._lock:
            return self._copies(a for a in self._activities if a.tracking_number == tracking_number)

    def recent_activities(self, limit: int = 50) -> List[Activity]:
        if limit <= 0:
            return []
        with self._lock:
            return self._copies(self._activities[-limit:])

    # -- lifecycle -------------------------------------------------------

    def counts(self) -> Dict[str, int]:
        with self._lock:
            return {
                "locations": len(self._locations),
                "products": len(self._products),
                "packages": len(self._packages),
                "activities": len(self._activities),
            }

    def reset(self) -> None:
        with self._lock:
            self._locations.clear()
            self._products.clear()
            self._packages.clear()
            self._tracking_index.clear()
            self._activities.clear()
