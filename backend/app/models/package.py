"""
Package model.

A package is identified by its tracking number (unique natural key) in
addition to its internal id. Its status is only changed through the
status engine so that every change leaves an activity behind.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from backend.app.models.base import CamelModel, utc_now
from backend.app.models.shipment_enums import PackageStatus, Priority


class Package(CamelModel):
    id: str
    tracking_number: str
    status: PackageStatus = PackageStatus.PENDING

    # Weak references by id
    product_id: Optional[str] = None
    sender_location_id: Optional[str] = None
    recipient_location_id: Optional[str] = None

    sender_name: str = ""
    recipient_name: str = ""
    recipient_email: str = ""
    recipient_phone: str = ""

    service_type: str = "Swift Standard"
    priority: Priority = Priority.STANDARD
    cost: float = Field(0.0, ge=0)
    current_location: Optional[str] = None

    pickup_date: Optional[datetime] = None
    estimated_delivery_date: Optional[datetime] = None
    actual_delivery_date: Optional[datetime] = None

    notes: str = ""
    special_handling: List[str] = Field(default_factory=list)
    assigned_agent: Optional[str] = None
    is_active: bool = True

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    created_by: str = "system"
