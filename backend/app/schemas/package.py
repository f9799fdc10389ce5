"""
Package and tracking-number Pydantic schemas.

Defines request models for the admin package and tracking-number actions.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from backend.app.models.base import CamelModel
from backend.app.models.shipment_enums import ActivityType, PackageStatus, Priority


class TrackingNumberCreate(CamelModel):
    """Schema for creating a package; the tracking number is generated when omitted."""
    product_id: str = Field(..., min_length=1)
    sender_location_id: str = Field(..., min_length=1)
    recipient_location_id: str = Field(..., min_length=1)
    tracking_number: Optional[str] = Field(None, min_length=4, max_length=40)
    status: PackageStatus = PackageStatus.PENDING
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
    notes: str = ""
    special_handling: List[str] = Field(default_factory=list)
    assigned_agent: Optional[str] = None


class TrackingNumberUpdate(CamelModel):
    """Schema for updating a package. A status change is recorded as such."""
    status: Optional[PackageStatus] = None
    product_id: Optional[str] = None
    sender_location_id: Optional[str] = None
    recipient_location_id: Optional[str] = None
    sender_name: Optional[str] = None
    recipient_name: Optional[str] = None
    recipient_email: Optional[str] = None
    recipient_phone: Optional[str] = None
    service_type: Optional[str] = None
    priority: Optional[Priority] = None
    cost: Optional[float] = Field(None, ge=0)
    current_location: Optional[str] = None
    pickup_date: Optional[datetime] = None
    estimated_delivery_date: Optional[datetime] = None
    notes: Optional[str] = None
    special_handling: Optional[List[str]] = None
    assigned_agent: Optional[str] = None
    is_active: Optional[bool] = None


class StatusUpdateRequest(CamelModel):
    """Payload of the ``update_status`` action."""
    tracking_number: str = Field(..., min_length=1)
    new_status: PackageStatus
    reason: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = None


class PackageEventRequest(CamelModel):
    """Payload of the ``add_event`` action."""
    tracking_number: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1, max_length=500)
    location: str = Field(..., min_length=1)


class ActivityCreate(CamelModel):
    """Payload of the ``add_activity`` action."""
    tracking_number_id: str = Field(..., min_length=1)
    type: ActivityType = ActivityType.NOTE_ADDED
    location: str = "Unknown"
    location_id: str = ""
    description: str = "Activity added"
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    metadata: Optional[Dict[str, Any]] = None
