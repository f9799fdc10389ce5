"""
Dashboard statistics computed from the entity store.
"""

from backend.app.models.events import StatsSnapshot
from backend.app.models.shipment_enums import PackageStatus, Priority
from backend.app.services.entity_store import EntityStore
from backend.app.services.event_bus import EventBus


def compute_package_stats(store: EntityStore, bus: EventBus = None) -> StatsSnapshot:
    """
    Snapshot of package counts and revenue.

    Every status and priority appears in the breakdowns, zero-filled.
    ``recent_events`` is the number of events the bus has published.
    """
    packages = store.list_packages()

    by_status = {status: 0 for status in PackageStatus}
    by_priority = {priority.value: 0 for priority in Priority}
    for package in packages:
        by_status[package.status] += 1
        by_priority[package.priority.value] += 1

    total_revenue = round(sum(p.cost for p in packages), 2)
    exception_count = by_status[PackageStatus.EXCEPTION]

    return StatsSnapshot(
        total=len(packages),
        by_status=by_status,
        by_priority=by_priority,
        active_shipments=len(packages) - by_status[PackageStatus.DELIVERED] - exception_count,
        delivered_today=len(store.list_delivered_today()),
        exception_count=exception_count,
        total_revenue=total_revenue,
        average_package_value=round(total_revenue / len(packages), 2) if packages else 0.0,
        recent_events=bus.published_count if bus is not None else 0,
    )
