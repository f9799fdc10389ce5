"""
Demo data seeding.

Creates the demo accounts, two locations, two products and a handful of
packages at different points of the delivery chain. Seeding goes through
the catalogue service and status engine, so the activity trail of every
seeded package is as complete as one created through the API.
"""

import logging
from datetime import timedelta
from typing import Dict

from backend.app.db.state import ShippingState
from backend.app.models.base import utc_now
from backend.app.models.enums import UserRole
from backend.app.models.shipment_enums import LocationType, PackageStatus, Priority
from backend.app.models.user import User

logger = logging.getLogger("swiftcourier.seed")

DEMO_USERS = (
    User(id="demo_user_123", email="demo@swiftcourier.com", name="Demo User", role=UserRole.DEMO),
    User(id="admin_user_456", email="admin@swiftcourier.com", name="Admin User", role=UserRole.ADMIN),
    User(id="business_user_789", email="business@swiftcourier.com", name="Business User", role=UserRole.BUSINESS),
)

WEEKDAY_HOURS = {"open": "09:00", "close": "18:00"}
CLOSED = {"open": "Closed", "close": "Closed"}


def _hours(saturday: Dict[str, str]) -> Dict[str, Dict[str, str]]:
    hours = {day: WEEKDAY_HOURS for day in ("monday", "tuesday", "wednesday", "thursday", "friday")}
    hours["saturday"] = saturday
    hours["sunday"] = CLOSED
    return hours


def seed_users(state: ShippingState) -> int:
    """Add the demo accounts that are missing. Returns how many were added."""
    added = 0
    for user in DEMO_USERS:
        if state.users.find_by_id(user.id) is None:
            state.users.add(user.model_copy())
            added += 1
    return added


def seed_demo_data(state: ShippingState) -> Dict[str, int]:
    """
    Seed demo catalogue and packages into an empty store.

    Does nothing for collections that already hold data.
    """
    seeded = {"users": seed_users(state), "locations": 0, "products": 0, "packages": 0}
    catalog, engine, store = state.catalog, state.engine, state.store

    if not store.list_locations():
        warehouse = catalog.create_location({
            "name": "Main Warehouse",
            "type": LocationType.WAREHOUSE,
            "address": {"street": "123 Commerce St", "city": "New York", "state": "NY",
                        "zip_code": "10001", "country": "USA"},
            "coordinates": {"latitude": 40.7128, "longitude": -74.006},
            "contact": {"person_name": "John Manager", "email": "john@swiftcourier.com",
                        "phone": "+1-212-555-0001"},
            "operating_hours": _hours({"open": "10:00", "close": "16:00"}),
            "capacity": {"max_packages": 5000, "current_packages": 2341},
            "service_zones": ["NY", "NJ", "CT"],
        })
        hub = catalog.create_location({
            "name": "Downtown Hub",
            "type": LocationType.HUB,
            "address": {"street": "456 Distribution Ave", "city": "Los Angeles", "state": "CA",
                        "zip_code": "90001", "country": "USA"},
            "coordinates": {"latitude": 34.0522, "longitude": -118.2437},
            "contact": {"person_name": "Sarah Hub Manager", "email": "sarah@swiftcourier.com",
                        "phone": "+1-213-555-0002"},
            "operating_hours": _hours(CLOSED),
            "capacity": {"max_packages": 3000, "current_packages": 1567},
            "service_zones": ["CA", "AZ", "NV"],
        })
        seeded["locations"] = 2
    else:
        locations = store.list_locations()
        warehouse, hub = locations[0], locations[-1]

    if not store.list_products():
        electronics = catalog.create_product({
            "sku": "ELC-001",
            "name": "Electronics Package",
            "description": "Generic electronics shipment",
            "category": "Electronics",
            "dimensions": {"length": 30, "width": 20, "height": 15, "unit": "cm"},
            "weight": {"value": 5, "unit": "kg"},
            "pricing": {"base_cost": 25.99, "currency": "USD"},
        })
        documents = catalog.create_product({
            "sku": "DOC-001",
            "name": "Documents",
            "description": "Document shipment",
            "category": "Documents",
            "dimensions": {"length": 25, "width": 17, "height": 2, "unit": "cm"},
            "weight": {"value": 0.5, "unit": "kg"},
            "pricing": {"base_cost": 9.99, "currency": "USD"},
        })
        seeded["products"] = 2
    else:
        products = store.list_products()
        electronics, documents = products[0], products[-1]

    if not store.list_packages():
        now = utc_now()
        demo_packages = (
            ("SC1234567890", electronics, Priority.EXPRESS, "Swift Express", 24.99,
             [(PackageStatus.PICKED_UP, "Package picked up"), (PackageStatus.IN_TRANSIT, "Departed sort facility")]),
            ("SC0987654321", documents, Priority.STANDARD, "Swift Standard", 18.99,
             [(PackageStatus.PICKED_UP, "Package picked up"), (PackageStatus.OUT_FOR_DELIVERY, "On vehicle for delivery"),
              (PackageStatus.DELIVERED, "Delivered to front door")]),
            ("SC1122334455", electronics, Priority.OVERNIGHT, "Overnight Express", 35.99, []),
        )
        for tracking_number, product, priority, service, cost, history in demo_packages:
            engine.create_package({
                "tracking_number": tracking_number,
                "product_id": product.id,
                "sender_location_id": warehouse.id,
                "recipient_location_id": hub.id,
                "sender_name": "Demo Sender",
                "recipient_name": "Demo Recipient",
                "recipient_email": "recipient@example.com",
                "service_type": service,
                "priority": priority,
                "cost": cost,
                "current_location": "New York, NY",
                "pickup_date": now,
                "estimated_delivery_date": now + timedelta(days=2),
            })
            for status, reason in history:
                engine.update_status(tracking_number, status, reason=reason)
            seeded["packages"] += 1

    logger.info("Seeded demo data: %s", seeded)
    return seeded


def reseed(state: ShippingState) -> Dict[str, int]:
    """Wipe the store and seed it again."""
    state.store.reset()
    return seed_demo_data(state)
