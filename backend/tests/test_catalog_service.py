"""
Catalogue service tests: location and product events.
"""

import pytest

from backend.app.models.events import LocationChangedEvent, ProductChangedEvent
from backend.app.schemas.location import LocationUpdate
from backend.app.services.catalog_service import CatalogService
from backend.app.services.entity_store import EntityStore
from backend.app.services.event_bus import TOPIC_LOCATIONS, TOPIC_PRODUCTS, EventBus


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def catalog(bus):
    return CatalogService(EntityStore(), bus)


def _record(bus, topic):
    received = []
    bus.subscribe(topic, received.append)
    return received


def test_location_update_changes_use_wire_keys(catalog, bus):
    events = _record(bus, TOPIC_LOCATIONS)
    location = catalog.create_location({"name": "Main Warehouse", "type": "warehouse"}, actor="admin_user_456")

    catalog.update_location(location.id, {
        "operating_hours": {"monday": {"open": "08:00", "close": "17:00"}},
        "address": {"street": "1 Main", "city": "New York", "state": "NY", "zip_code": "10001"},
    })

    assert [e.type for e in events] == ["location_created", "location_updated"]
    changes = events[1].changes
    assert set(changes) == {"operatingHours", "address", "updatedAt"}
    assert changes["address"]["zipCode"] == "10001"
    assert changes["operatingHours"]["monday"]["open"] == "08:00"
    assert events[0].location.created_by == "admin_user_456"


def test_location_update_from_schema(catalog, bus):
    events = _record(bus, TOPIC_LOCATIONS)
    location = catalog.create_location({"name": "Main Warehouse", "type": "warehouse"})

    catalog.update_location(location.id, LocationUpdate.model_validate({"serviceZones": ["NY", "NJ"]}))

    assert events[-1].changes["serviceZones"] == ["NY", "NJ"]
    assert "service_zones" not in events[-1].changes


def test_product_update_changes_use_wire_keys(catalog, bus):
    events = _record(bus, TOPIC_PRODUCTS)
    product = catalog.create_product({"sku": "ELC-001", "name": "Electronics"})

    catalog.update_product(product.id, {"pricing": {"base_cost": 30.0}, "isActive": False})

    changes = events[-1].changes
    assert isinstance(events[-1], ProductChangedEvent)
    assert changes["pricing"]["baseCost"] == 30.0
    assert changes["isActive"] is False


def test_delete_events_and_missing_ids(catalog, bus):
    location_events = _record(bus, TOPIC_LOCATIONS)
    product_events = _record(bus, TOPIC_PRODUCTS)
    location = catalog.create_location({"name": "Hub", "type": "hub"})

    assert catalog.delete_location(location.id) is True
    assert catalog.delete_location(location.id) is False
    assert catalog.update_product("prod_missing", {"name": "x"}) is None
    assert catalog.delete_product("prod_missing") is False

    assert isinstance(location_events[-1], LocationChangedEvent)
    assert location_events[-1].type == "location_deleted"
    assert product_events == []
