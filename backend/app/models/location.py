"""
Location model.

Pickup points, drop-off points, hubs and warehouses. Packages reference
locations by id only; deleting a location leaves those references dangling.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from backend.app.models.base import CamelModel, utc_now
from backend.app.models.shipment_enums import LocationType


class Address(CamelModel):
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = "USA"


class Coordinates(CamelModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class Contact(CamelModel):
    person_name: str = ""
    email: str = ""
    phone: str = ""


class OpeningHours(CamelModel):
    open: str
    close: str


class Capacity(CamelModel):
    max_packages: int = Field(0, ge=0)
    current_packages: int = Field(0, ge=0)


class Location(CamelModel):
    """A physical site in the courier network."""
    id: str
    name: str
    type: LocationType
    address: Address = Field(default_factory=Address)
    coordinates: Optional[Coordinates] = None
    contact: Optional[Contact] = None
    operating_hours: Dict[str, OpeningHours] = Field(default_factory=dict)
    capacity: Optional[Capacity] = None
    service_zones: List[str] = Field(default_factory=list)
    is_active: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    created_by: str = "system"
