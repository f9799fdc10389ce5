"""
Authentication API endpoints.

Token issuance belongs to the customer-facing site; this service only
offers a development helper to mint tokens for the seeded demo accounts,
plus ``/me`` and ``/logout``.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from backend.app.core.config import settings
from backend.app.core.dependencies import get_current_user
from backend.app.core.jwt import create_access_token
from backend.app.core.token_revocation import revoke_token
from backend.app.db.state import ShippingState, get_state
from backend.app.schemas.auth import TokenRequest, TokenResponse, UserResponse

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/token", response_model=TokenResponse)
async def issue_dev_token(
    request: TokenRequest,
    state: ShippingState = Depends(get_state)
):
    """
    Issue an access token for a directory user.

    Only available when ``debug`` is enabled.
    """
    if not settings.debug:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")

    user = state.users.find_by_id(request.user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    access_token = create_access_token(data={
        "sub": user.email,
        "user_id": user.id,
        "role": user.role.value,
    })

    return TokenResponse(access_token=access_token, user_id=user.id, role=user.role)


@router.get("/me")
async def get_me(
    current_user: dict = Depends(get_current_user),
    state: ShippingState = Depends(get_state)
):
    """Return the user the presented token belongs to."""
    user = state.users.find_by_id(current_user["user_id"])
    return {
        "success": True,
        "data": UserResponse.model_validate(user.model_dump()).model_dump(mode="json", by_alias=True),
    }


@router.post("/logout")
async def logout(current_user: dict = Depends(get_current_user)):
    """Revoke the presented token."""
    revoked = await revoke_token(current_user["token"], current_user["user_id"])
    if not revoked:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not revoke token, try again"
        )
    return {"success": True, "message": "Logged out"}
