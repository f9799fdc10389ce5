"""
Security guards for role-based access control.

Provides dependencies for protecting endpoints.
"""

from typing import Callable, List
from fastapi import Depends, HTTPException, status
from backend.app.models.enums import UserRole
from backend.app.core.dependencies import get_current_user, get_stream_user


def require_role(allowed_roles: List[UserRole], authenticate: Callable = get_current_user):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.get("/admin/packages")
        async def list_packages(current_user: dict = Depends(require_role([UserRole.ADMIN]))):
            ...

    Args:
        allowed_roles: List of UserRole enums that are allowed to access the endpoint
        authenticate: Dependency resolving the current user (header or stream variant)

    Returns:
        FastAPI dependency function that validates user role

    Raises:
        HTTPException 403 if user role is not in allowed_roles
    """
    async def role_checker(current_user: dict = Depends(authenticate)) -> dict:
        user_role_str = current_user.get("role")

        if not user_role_str:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Role information missing"
            )

        # Convert string role to UserRole enum
        try:
            user_role = UserRole(user_role_str)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid role"
            )

        # Check if user role is in allowed roles
        if user_role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {', '.join([r.value for r in allowed_roles])}"
            )

        return current_user

    return role_checker


# Admin-only endpoints
require_admin = require_role([UserRole.ADMIN])

# Admin-only push streams (token may arrive as a query parameter)
require_stream_admin = require_role([UserRole.ADMIN], authenticate=get_stream_user)
