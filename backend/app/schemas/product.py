"""
Product Pydantic schemas.
"""

from typing import Optional

from pydantic import Field

from backend.app.models.base import CamelModel
from backend.app.models.product import Dimensions, Pricing, Weight


class ProductCreate(CamelModel):
    sku: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=1000)
    category: str = ""
    dimensions: Optional[Dimensions] = None
    weight: Optional[Weight] = None
    pricing: Pricing = Field(default_factory=Pricing)
    is_active: bool = True


class ProductUpdate(CamelModel):
    sku: Optional[str] = Field(None, min_length=1, max_length=64)
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    category: Optional[str] = None
    dimensions: Optional[Dimensions] = None
    weight: Optional[Weight] = None
    pricing: Optional[Pricing] = None
    is_active: Optional[bool] = None
