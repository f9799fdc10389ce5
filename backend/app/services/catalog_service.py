"""
Catalogue service: locations and products.

Thin store-then-publish wrapper so that admin dashboards see catalogue
changes on the ``admin:locations`` and ``admin:products`` topics.
"""

from typing import Optional

from backend.app.models.events import LocationChangedEvent, ProductChangedEvent
from backend.app.models.location import Location
from backend.app.models.product import Product
from backend.app.services.entity_store import EntityData, EntityStore
from backend.app.services.event_bus import TOPIC_LOCATIONS, TOPIC_PRODUCTS, EventBus


class CatalogService:

    def __init__(self, store: EntityStore, bus: EventBus):
        self.store = store
        self.bus = bus

    # Locations

    def create_location(self, data: EntityData, actor: str = "system") -> Location:
        location = self.store.create_location({**dict(data), "created_by": actor})
        self.bus.publish(TOPIC_LOCATIONS, LocationChangedEvent(
            type="location_created", location_id=location.id, location=location
        ))
        return location

    def update_location(self, location_id: str, changes: EntityData) -> Optional[Location]:
        location = self.store.update_location(location_id, changes)
        if location is None:
            return None
        self.bus.publish(TOPIC_LOCATIONS, LocationChangedEvent(
            type="location_updated", location_id=location.id, location=location, changes=location.wire_changes(changes)
        ))
        return location

    def delete_location(self, location_id: str) -> bool:
        if not self.store.delete_location(location_id):
            return False
        self.bus.publish(TOPIC_LOCATIONS, LocationChangedEvent(type="location_deleted", location_id=location_id))
        return True

    # Products

    def create_product(self, data: EntityData, actor: str = "system") -> Product:
        product = self.store.create_product({**dict(data), "created_by": actor})
        self.bus.publish(TOPIC_PRODUCTS, ProductChangedEvent(
            type="product_created", product_id=product.id, product=product
        ))
        return product

    def update_product(self, product_id: str, changes: EntityData) -> Optional[Product]:
        product = self.store.update_product(product_id, changes)
        if product is None:
            return None
        self.bus.publish(TOPIC_PRODUCTS, ProductChangedEvent(
            type="product_updated", product_id=product.id, product=product, changes=product.wire_changes(changes)
        ))
        return product

    def delete_product(self, product_id: str) -> bool:
        if not self.store.delete_product(product_id):
            return False
        self.bus.publish(TOPIC_PRODUCTS, ProductChangedEvent(type="product_deleted", product_id=product_id))
        return True
