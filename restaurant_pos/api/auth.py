"""
Auth API endpoints - Login and token management
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select
import structlog

from restaurant_pos.core.clock import utc_now
from restaurant_pos.core.auth import create_access_token, verify_password
from restaurant_pos.core.database import get_session
from restaurant_pos.models.user import User
from restaurant_pos.schemas.token import LoginRequest, TokenResponse

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login_user(
    login_data: LoginRequest,
    session: Session = Depends(get_session)
):
    """Login user"""
    # Find user by email
    user = session.exec(
        select(User).where(User.email == login_data.email)
    ).first()

    if not user or not verify_password(login_data.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    # Check if user is active
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled"
        )

    user.last_login_at = utc_now()
    session.add(user)
    session.commit()
    session.refresh(user)

    access_token = create_access_token(
        user_id=user.id,
        business_unit_id=user.business_unit_id,
        role=user.role.value,
        name=user.name,
    )

    logger.info(f"User logged in: {user.id}")

    return TokenResponse(
        access_token=access_token,
        user_id=str(user.id),
        business_unit_id=str(user.business_unit_id),
        role=user.role.value,
    )
