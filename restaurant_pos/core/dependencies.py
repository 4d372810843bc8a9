"""
Authentication dependencies for FastAPI
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import uuid
import structlog

from restaurant_pos.core.auth import user_from_token
from restaurant_pos.core.permissions import CurrentUser

logger = structlog.get_logger(__name__)

# Missing credentials resolve to None; operations report "Unauthorized" themselves
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[CurrentUser]:
    """Get the session user from the JWT token, or None"""
    if credentials is None:
        return None

    user = user_from_token(credentials.credentials)
    if user is None:
        logger.debug("Rejected bearer token")
        return None

    logger.debug(f"User authenticated: {user.id}")
    return user


def check_business_unit(
    business_unit_id: uuid.UUID,
    user: Optional[CurrentUser],
) -> None:
    """Reject requests for a business unit other than the user's own"""
    if user is not None and user.business_unit_id != business_unit_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access to this business unit is not allowed",
        )
