"""
Activity model: one immutable entry in a package's history trail.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import ConfigDict, Field

from backend.app.models.base import CamelModel, utc_now
from backend.app.models.shipment_enums import ActivityType, PackageStatus


class Activity(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    tracking_number_id: str
    tracking_number: str
    type: ActivityType
    status: PackageStatus
    location: str = "Unknown"
    location_id: str = ""
    description: str = ""
    timestamp: datetime = Field(default_factory=utc_now)
    created_by: str = "system"
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    metadata: Optional[Dict[str, Any]] = None
