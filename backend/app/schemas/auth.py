"""
Authentication Pydantic schemas.
"""

from pydantic import BaseModel, Field

from backend.app.models.base import CamelModel
from backend.app.models.enums import UserRole


class TokenRequest(CamelModel):
    """Development token request for a seeded user."""
    user_id: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    """Schema for token response."""
    access_token: str
    token_type: str = "bearer"
    user_id: str
    role: UserRole


class UserResponse(CamelModel):
    """Schema for user information response."""
    id: str
    email: str
    name: str
    role: UserRole
    is_active: bool
