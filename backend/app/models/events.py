"""
Realtime event types.

Events are transient: they are built by the status engine or catalog
service, handed to the event bus, and forgotten once delivered. Each
variant is tagged by its ``type`` literal so consumers can dispatch on it.
"""

import uuid
from datetime import datetime
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import Field, TypeAdapter

from backend.app.models.activity import Activity
from backend.app.models.base import CamelModel, utc_now
from backend.app.models.location import Location
from backend.app.models.package import Package
from backend.app.models.product import Product
from backend.app.models.shipment_enums import PackageStatus


def new_event_id() -> str:
    return f"evt_{uuid.uuid4().hex[:16]}"


class BaseEvent(CamelModel):
    timestamp: datetime = Field(default_factory=utc_now)


class DomainEvent(BaseEvent):
    """Events produced by a store mutation. ``id`` is unique per publication."""
    id: str = Field(default_factory=new_event_id)
    changes: Optional[Dict[str, Any]] = None


# Stream control events

class ConnectionEvent(BaseEvent):
    type: Literal["connection"] = "connection"
    status: str = "connected"
    user_id: str


class StatsSnapshot(CamelModel):
    total: int = 0
    by_status: Dict[PackageStatus, int] = Field(default_factory=dict)
    by_priority: Dict[str, int] = Field(default_factory=dict)
    active_shipments: int = 0
    delivered_today: int = 0
    exception_count: int = 0
    total_revenue: float = 0.0
    average_package_value: float = 0.0
    recent_events: int = 0
    timestamp: datetime = Field(default_factory=utc_now)


class StatsEvent(BaseEvent):
    type: Literal["stats"] = "stats"
    data: StatsSnapshot


class HeartbeatEvent(BaseEvent):
    type: Literal["heartbeat"] = "heartbeat"


# Package domain events (topic "admin:packages")

class StatusChangedEvent(DomainEvent):
    type: Literal["status_changed"] = "status_changed"
    tracking_number: str
    old_status: PackageStatus
    new_status: PackageStatus
    reason: Optional[str] = None
    package: Package


class PackageCreatedEvent(DomainEvent):
    type: Literal["package_created"] = "package_created"
    tracking_number: str
    package: Package


class PackageUpdatedEvent(DomainEvent):
    type: Literal["package_updated"] = "package_updated"
    tracking_number: str
    package: Package


class PackageDeletedEvent(DomainEvent):
    type: Literal["package_deleted"] = "package_deleted"
    tracking_number: str
    package_id: str


class ActivityAddedEvent(DomainEvent):
    type: Literal["event_added"] = "event_added"
    tracking_number: str
    activity: Activity
    package: Package


# Catalogue events (topics "admin:locations" / "admin:products")

class LocationChangedEvent(DomainEvent):
    type: Literal["location_created", "location_updated", "location_deleted"]
    location_id: str
    location: Optional[Location] = None


class ProductChangedEvent(DomainEvent):
    type: Literal["product_created", "product_updated", "product_deleted"]
    product_id: str
    product: Optional[Product] = None


Event = Annotated[
    Union[
        ConnectionEvent,
        StatsEvent,
        HeartbeatEvent,
        StatusChangedEvent,
        PackageCreatedEvent,
        PackageUpdatedEvent,
        PackageDeletedEvent,
        ActivityAddedEvent,
        LocationChangedEvent,
        ProductChangedEvent,
    ],
    Field(discriminator="type"),
]

event_adapter = TypeAdapter(Event)


def parse_event(payload: Union[str, bytes, Dict[str, Any]]):
    """Rebuild a typed event from its wire form."""
    if isinstance(payload, (str, bytes)):
        return event_adapter.validate_json(payload)
    return event_adapter.validate_python(payload)
