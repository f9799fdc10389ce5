"""
User roles enumeration.

Defines the role types for the courier console.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        ADMIN: Operates the admin dashboard and realtime feed
        USER: Regular customer account
        BUSINESS: Business shipper account
        DEMO: Shared demo account
    """
    ADMIN = "admin"
    USER = "user"
    BUSINESS = "business"
    DEMO = "demo"
