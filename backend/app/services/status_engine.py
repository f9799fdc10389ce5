"""
Status and activity engine for packages.

Every package mutation goes through here so that the store, the activity
trail and the event bus stay in step: the store is updated first, then the
activity is appended, then exactly one event is published. A subscriber
that receives the event can re-query the store and see the new state.

Read-modify-write sequences hold the per tracking-number lock, so two
requests touching the same package never interleave.
"""

import logging
from typing import Any, Callable, Dict, Optional, Union

from backend.app.core.exceptions import InvalidTransitionError, ValidationError
from backend.app.models.activity import Activity
from backend.app.models.base import utc_now
from backend.app.models.events import (
    ActivityAddedEvent,
    PackageCreatedEvent,
    PackageDeletedEvent,
    PackageUpdatedEvent,
    StatusChangedEvent,
)
from backend.app.models.package import Package
from backend.app.models.shipment_enums import ActivityType, PackageStatus, TERMINAL_STATUSES
from backend.app.services.entity_store import EntityData, EntityStore, normalize_keys
from backend.app.services.event_bus import TOPIC_PACKAGES, EventBus
from backend.app.services.package_locking import KeyedLock

logger = logging.getLogger("swiftcourier.tracking")

TransitionValidator = Callable[[PackageStatus, PackageStatus], bool]

FORWARD_ORDER = (
    PackageStatus.PENDING,
    PackageStatus.PICKED_UP,
    PackageStatus.IN_TRANSIT,
    PackageStatus.OUT_FOR_DELIVERY,
    PackageStatus.DELIVERED,
)


def allow_any_transition(old: PackageStatus, new: PackageStatus) -> bool:
    return True


def forward_only_transitions(old: PackageStatus, new: PackageStatus) -> bool:
    """
    Only allow progress along the delivery chain.

    Steps may be skipped (pending → in_transit) but never reversed.
    ``exception`` is reachable from any non-terminal status. Re-applying
    the current status is allowed.
    """
    if old == new:
        return True
    if old in TERMINAL_STATUSES:
        return False
    if new == PackageStatus.EXCEPTION:
        return True
    return FORWARD_ORDER.index(new) > FORWARD_ORDER.index(old)


TRANSITION_POLICIES: Dict[str, TransitionValidator] = {
    "permissive": allow_any_transition,
    "forward_only": forward_only_transitions,
}


def resolve_transition_policy(name: str) -> TransitionValidator:
    try:
        return TRANSITION_POLICIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown status transition policy {name!r}; expected one of {sorted(TRANSITION_POLICIES)}"
        )


def _coerce_status(value: Union[str, PackageStatus]) -> PackageStatus:
    try:
        return PackageStatus(value)
    except ValueError:
        raise ValidationError(
            f"Invalid status {value!r}",
            details={"allowed": [s.value for s in PackageStatus]}
        )


def _coerce_activity_type(value: Union[str, ActivityType]) -> ActivityType:
    try:
        return ActivityType(value)
    except ValueError:
        raise ValidationError(
            f"Invalid activity type {value!r}",
            details={"allowed": [t.value for t in ActivityType]}
        )


class StatusEngine:
    """Applies package mutations and emits the matching history and events."""

    def __init__(
        self,
        store: EntityStore,
        bus: EventBus,
        transition_validator: Optional[TransitionValidator] = None,
    ):
        self.store = store
        self.bus = bus
        self.transition_validator = transition_validator or allow_any_transition
        self._locks = KeyedLock()

    def _check_transition(self, package: Package, new_status: PackageStatus) -> None:
        if not self.transition_validator(package.status, new_status):
            raise InvalidTransitionError(package.tracking_number, package.status.value, new_status.value)

    def _status_changes(self, package: Package, new_status: PackageStatus) -> Dict[str, Any]:
        changes: Dict[str, Any] = {"status": new_status}
        if new_status == PackageStatus.DELIVERED and package.actual_delivery_date is None:
            changes["actual_delivery_date"] = utc_now()
        return changes

    def _apply_status_change(
        self,
        package: Package,
        new_status: PackageStatus,
        changes: Dict[str, Any],
        reason: Optional[str],
        actor: str,
        location: Optional[str],
    ) -> Package:
        """Store update, activity, event. Caller holds the package lock."""
        old_status = package.status
        changes = {**changes, **self._status_changes(package, new_status)}
        updated = self.store.update_package(package.id, changes)

        metadata: Dict[str, Any] = {"oldStatus": old_status.value}
        if reason:
            metadata["reason"] = reason
        self.store.append_activity({
            "tracking_number_id": updated.id,
            "tracking_number": updated.tracking_number,
            "type": ActivityType.STATUS_CHANGED,
            "status": new_status,
            "location": location or updated.current_location or "Unknown",
            "description": reason or f"Status updated from {old_status.value} to {new_status.value}",
            "created_by": actor,
            "metadata": metadata,
        })

        self.bus.publish(TOPIC_PACKAGES, StatusChangedEvent(
            tracking_number=updated.tracking_number,
            old_status=old_status,
            new_status=new_status,
            reason=reason,
            package=updated,
            changes=updated.wire_changes(changes),
        ))
        logger.info("Package %s: %s -> %s", updated.tracking_number, old_status.value, new_status.value)
        return updated

    def update_status(
        self,
        tracking_number: str,
        new_status: Union[str, PackageStatus],
        reason: Optional[str] = None,
        actor: str = "system",
        location: Optional[str] = None,
    ) -> bool:
        """
        Move a package to ``new_status``.

        Args:
            tracking_number: Package tracking number
            new_status: Target status
            reason: Free text kept in the activity metadata and the event
            actor: User id recorded as the activity author
            location: Where the change happened; also becomes the current location

        Returns:
            False when no package has this tracking number (nothing is changed)

        Raises:
            InvalidTransitionError: if the transition policy rejects the change
        """
        status = _coerce_status(new_status)
        with self._locks.hold(tracking_number):
            package = self.store.get_package_by_tracking_number(tracking_number)
            if package is None:
                return False
            self._check_transition(package, status)
            changes = {"current_location": location} if location else {}
            self._apply_status_change(package, status, changes, reason, actor, location)
            return True

    def _record_activity(
        self,
        package: Package,
        description: str,
        location: str,
        activity_type: ActivityType,
        actor: str,
        location_id: str = "",
        metadata: Optional[Dict[str, Any]] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> Activity:
        """Append a non-status activity and publish it. Caller holds the package lock."""
        changes: Dict[str, Any] = {}
        if activity_type == ActivityType.LOCATION_UPDATED and location:
            changes["current_location"] = location
        # An empty update still refreshes updatedAt
        updated = self.store.update_package(package.id, changes)
        activity = self.store.append_activity({
            "tracking_number_id": updated.id,
            "tracking_number": updated.tracking_number,
            "type": activity_type,
            "status": updated.status,
            "location": location or "Unknown",
            "location_id": location_id,
            "description": description,
            "created_by": actor,
            "metadata": metadata,
            "latitude": latitude,
            "longitude": longitude,
        })
        self.bus.publish(TOPIC_PACKAGES, ActivityAddedEvent(
            tracking_number=updated.tracking_number,
            activity=activity,
            package=updated,
        ))
        return activity

    def add_event(
        self,
        tracking_number: str,
        description: str,
        location: str,
        activity_type: Union[str, ActivityType] = ActivityType.NOTE_ADDED,
        actor: str = "system",
        **extra: Any,
    ) -> bool:
        """
        Append a history entry to a package without changing its status.

        Returns:
            False when no package has this tracking number
        """
        with self._locks.hold(tracking_number):
            package = self.store.get_package_by_tracking_number(tracking_number)
            if package is None:
                return False
            self._record_activity(package, description, location, _coerce_activity_type(activity_type), actor, **extra)
            return True

    def add_activity(
        self,
        package_id: str,
        description: str = "Activity added",
        location: str = "Unknown",
        activity_type: Union[str, ActivityType] = ActivityType.NOTE_ADDED,
        actor: str = "system",
        **extra: Any,
    ) -> Optional[Activity]:
        """Same as ``add_event`` but keyed by package id; returns the new record."""
        package = self.store.get_package_by_id(package_id)
        if package is None:
            return None
        with self._locks.hold(package.tracking_number):
            package = self.store.get_package_by_id(package_id)
            if package is None:
                return None
            return self._record_activity(package, description, location, _coerce_activity_type(activity_type), actor, **extra)

    def create_package(self, data: EntityData, actor: str = "system") -> Package:
        values = normalize_keys(Package, data)
        values["created_by"] = actor
        if "status" in values:
            values["status"] = _coerce_status(values["status"])
        package = self.store.create_package(values)
        with self._locks.hold(package.tracking_number):
            self.store.append_activity({
                "tracking_number_id": package.id,
                "tracking_number": package.tracking_number,
                "type": ActivityType.CREATED,
                "status": package.status,
                "location": package.current_location or "System",
                "description": "Tracking number created",
                "created_by": actor,
            })
            self.bus.publish(TOPIC_PACKAGES, PackageCreatedEvent(
                tracking_number=package.tracking_number,
                package=package,
            ))
        return package

    def update_package(self, package_id: str, changes: EntityData, actor: str = "system") -> Optional[Package]:
        """
        Merge ``changes`` into a package.

        A change of status is handled as a status mutation (status_changed
        activity and event); any other change publishes package_updated.
        """
        values = normalize_keys(Package, changes)
        package = self.store.get_package_by_id(package_id)
        if package is None:
            return None
        with self._locks.hold(package.tracking_number):
            package = self.store.get_package_by_id(package_id)
            if package is None:
                return None
            new_status = values.pop("status", None)
            if new_status is not None:
                new_status = _coerce_status(new_status)
                if new_status != package.status:
                    self._check_transition(package, new_status)
                    return self._apply_status_change(
                        package, new_status, values, None, actor, values.get("current_location")
                    )
            updated = self.store.update_package(package_id, values)
            self.bus.publish(TOPIC_PACKAGES, PackageUpdatedEvent(
                tracking_number=updated.tracking_number,
                package=updated,
                changes=updated.wire_changes(values),
            ))
            return updated

    def delete_package(self, package_id: str) -> bool:
        """Remove a package. Its activities stay in the history."""
        package = self.store.get_package_by_id(package_id)
        if package is None:
            return False
        with self._locks.hold(package.tracking_number):
            if not self.store.delete_package(package_id):
                return False
            self.bus.publish(TOPIC_PACKAGES, PackageDeletedEvent(
                tracking_number=package.tracking_number,
                package_id=package_id,
            ))
            return True
