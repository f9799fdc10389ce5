"""
Authentication dependencies for FastAPI.

This module provides dependencies for protecting routes with JWT authentication.
"""

from typing import Optional
from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from backend.app.core.exceptions import AuthenticationError, InsufficientPermissionsError, TokenRevokedError
from backend.app.core.jwt import decode_access_token
from backend.app.core.token_revocation import is_token_revoked
from backend.app.db.state import ShippingState, get_state

# HTTP Bearer security scheme; a missing header is reported as 401 below
security = HTTPBearer(auto_error=False)

AUTH_COOKIE = "auth-token"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def authenticate_token(token: Optional[str], state: ShippingState) -> dict:
    """
    Resolve an access token to the current user.

    Security checks:
    1. Validates JWT token signature and expiry
    2. Checks if token has been explicitly revoked
    3. Verifies the user still exists and is active (real-time check)

    Returns:
        Decoded token payload, with the role taken from the user directory

    Raises:
        HTTPException: 401 if the token is missing or invalid
        TokenRevokedError, AuthenticationError: 401 for revoked tokens and unknown users
        InsufficientPermissionsError: 403 if the account is inactive
    """
    if not token:
        raise _unauthorized("Not authenticated")

    # 1. Decode and validate JWT
    payload = decode_access_token(token)
    if payload is None:
        raise _unauthorized("Could not validate credentials")

    user_id = payload.get("user_id")
    if not user_id:
        raise _unauthorized("Invalid token payload")

    # 2. Check if this specific token has been revoked
    if await is_token_revoked(token):
        raise TokenRevokedError()

    # 3. Real-time directory check
    user = state.users.find_by_id(str(user_id))
    if not user:
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise InsufficientPermissionsError("User account is inactive")

    return {**payload, "user_id": user.id, "role": user.role.value, "token": token}


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    state: ShippingState = Depends(get_state)
) -> dict:
    """
    FastAPI dependency for JWT authentication.

    Reads the token from the ``Authorization: Bearer`` header, falling back
    to the ``auth-token`` cookie set by the web console.
    """
    token = credentials.credentials if credentials else request.cookies.get(AUTH_COOKIE)
    return await authenticate_token(token, state)


async def get_stream_user(
    request: Request,
    token: Optional[str] = Query(None, description="Access token, for EventSource clients"),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    state: ShippingState = Depends(get_state)
) -> dict:
    """
    Authentication for push streams.

    Browsers' EventSource cannot set headers, so the token may also come
    from the ``token`` query parameter.
    """
    if credentials:
        token = credentials.credentials
    elif not token:
        token = request.cookies.get(AUTH_COOKIE)
    return await authenticate_token(token, state)
