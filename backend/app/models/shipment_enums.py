"""
Shipment enumerations: package status, priority, location and activity types.
"""

import enum


class PackageStatus(str, enum.Enum):
    """
    Package status enumeration.

    Status flow:
        PENDING → PICKED_UP → IN_TRANSIT → OUT_FOR_DELIVERY → DELIVERED
        EXCEPTION is reachable from any non-terminal status
    """
    PENDING = "pending"
    PICKED_UP = "picked_up"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    EXCEPTION = "exception"


TERMINAL_STATUSES = frozenset({PackageStatus.DELIVERED, PackageStatus.EXCEPTION})


class Priority(str, enum.Enum):
    STANDARD = "standard"
    EXPRESS = "express"
    OVERNIGHT = "overnight"


class LocationType(str, enum.Enum):
    PICKUP = "pickup"
    DROPOFF = "dropoff"
    HUB = "hub"
    WAREHOUSE = "warehouse"


class ActivityType(str, enum.Enum):
    """Kinds of entries in a package's history trail."""
    CREATED = "created"
    PICKED_UP = "picked_up"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    EXCEPTION = "exception"
    NOTE_ADDED = "note_added"
    LOCATION_UPDATED = "location_updated"
    STATUS_CHANGED = "status_changed"
