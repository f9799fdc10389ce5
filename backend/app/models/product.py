"""
Product model: catalogue of shippable goods. Unrelated to package lifecycle.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from backend.app.models.base import CamelModel, utc_now


class Dimensions(CamelModel):
    length: float = Field(..., gt=0)
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    unit: Literal["cm", "in"] = "cm"


class Weight(CamelModel):
    value: float = Field(..., gt=0)
    unit: Literal["kg", "lbs"] = "kg"


class Pricing(CamelModel):
    base_cost: float = Field(0.0, ge=0)
    currency: str = "USD"


class Product(CamelModel):
    id: str
    sku: str
    name: str
    description: str = ""
    category: str = ""
    dimensions: Optional[Dimensions] = None
    weight: Optional[Weight] = None
    pricing: Pricing = Field(default_factory=Pricing)
    is_active: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    created_by: str = "system"
