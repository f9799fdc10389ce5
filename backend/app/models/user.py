"""
User model for the in-memory user directory.

Token issuance is not this service's concern; users only need an id and a
role so the admin guards can resolve a token to a permission.
"""

from datetime import datetime

from pydantic import Field

from backend.app.models.base import CamelModel, utc_now
from backend.app.models.enums import UserRole


class User(CamelModel):
    id: str
    email: str
    name: str
    role: UserRole = UserRole.USER
    is_active: bool = True
    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self):
        return f"<User(id='{self.id}', email='{self.email}', role='{self.role.value}')>"
