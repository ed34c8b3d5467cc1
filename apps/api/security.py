"""Caller identity for REST endpoints.

Bearer tokens are verified upstream by the gateway, which forwards the
resolved claims as ``X-User-Id`` and ``X-User-Role`` headers.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from freshcart.domain.value_objects import Identity


async def get_identity(
    x_user_id: Optional[int] = Header(None),
    x_user_role: str = Header("CUSTOMER"),
) -> Identity:
    """Resolve the calling user.

    Raises:
        HTTPException: 401 if the gateway did not forward a user id
    """
    if x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return Identity(user_id=x_user_id, role=x_user_role.upper())


async def require_admin(identity: Identity = Depends(get_identity)) -> Identity:
    """Resolve the calling user and require the ADMIN role."""
    if not identity.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )
    return identity


def ensure_can_act_for(identity: Identity, user_id: int) -> None:
    """Reject callers that are neither ``user_id`` nor an admin."""
    if not identity.can_act_for(user_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to access another user's data",
        )
