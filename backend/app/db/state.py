"""
Application state: the explicitly constructed shipping collaborators.

One ``ShippingState`` is built per application instance (at startup, or
per test) and handed to request handlers through the dependencies below,
the same way a database session would be.
"""

from dataclasses import dataclass, field

from fastapi import Request

from backend.app.core.config import Settings, settings as default_settings
from backend.app.services.catalog_service import CatalogService
from backend.app.services.entity_store import EntityStore
from backend.app.services.event_bus import EventBus
from backend.app.services.stats import compute_package_stats
from backend.app.services.status_engine import StatusEngine, resolve_transition_policy
from backend.app.services.stream_gateway import GatewayRegistry
from backend.app.services.user_directory import UserDirectory


@dataclass
class ShippingState:
    store: EntityStore
    bus: EventBus
    engine: StatusEngine
    catalog: CatalogService
    users: UserDirectory
    gateways: GatewayRegistry = field(default_factory=GatewayRegistry)

    def stats(self):
        return compute_package_stats(self.store, self.bus)


def build_state(config: Settings = None) -> ShippingState:
    """Wire a fresh, empty state according to ``config``."""
    config = config or default_settings
    store = EntityStore()
    bus = EventBus()
    return ShippingState(
        store=store,
        bus=bus,
        engine=StatusEngine(store, bus, resolve_transition_policy(config.status_transition_policy)),
        catalog=CatalogService(store, bus),
        users=UserDirectory(),
    )


def get_state(request: Request) -> ShippingState:
    """FastAPI dependency returning the state attached to the running app."""
    return request.app.state.shipping
