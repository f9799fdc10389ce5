"""
Location Pydantic schemas.

Defines request models for location management.
"""

from typing import Dict, List, Optional

from pydantic import Field

from backend.app.models.base import CamelModel
from backend.app.models.location import Address, Capacity, Contact, Coordinates, OpeningHours
from backend.app.models.shipment_enums import LocationType


class LocationCreate(CamelModel):
    """Schema for creating a new location."""
    name: str = Field(..., min_length=1, max_length=200)
    type: LocationType
    address: Address = Field(default_factory=Address)
    coordinates: Optional[Coordinates] = None
    contact: Optional[Contact] = None
    operating_hours: Dict[str, OpeningHours] = Field(default_factory=dict)
    capacity: Optional[Capacity] = None
    service_zones: List[str] = Field(default_factory=list)
    is_active: bool = True


class LocationUpdate(CamelModel):
    """Schema for updating an existing location."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    type: Optional[LocationType] = None
    address: Optional[Address] = None
    coordinates: Optional[Coordinates] = None
    contact: Optional[Contact] = None
    operating_hours: Optional[Dict[str, OpeningHours]] = None
    capacity: Optional[Capacity] = None
    service_zones: Optional[List[str]] = None
    is_active: Optional[bool] = None
