"""
JWT Authentication utilities
"""

from datetime import timedelta
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError
from typing import Dict, Optional
import uuid

from restaurant_pos.core.clock import utc_now
from restaurant_pos.core.config import get_settings
from restaurant_pos.core.permissions import CurrentUser
from restaurant_pos.schemas.token import TokenPayload

settings = get_settings()

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Check a password against its stored hash"""
    if not password_hash:
        return False
    return pwd_context.verify(plain_password, password_hash)


def create_access_token(
    user_id: uuid.UUID,
    business_unit_id: uuid.UUID,
    role: str,
    name: str = "",
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create JWT access token with user claims"""
    if expires_delta:
        expire = utc_now() + expires_delta
    else:
        expire = utc_now() + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "sub": str(user_id),
        "business_unit_id": str(business_unit_id),
        "role": role,
        "name": name,
        "exp": expire,
        "iat": utc_now(),
    }

    encoded_jwt = jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return encoded_jwt


def decode_access_token(token: str) -> Optional[Dict]:
    """Decode and validate JWT token"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        return payload
    except JWTError:
        return None


def user_from_token(token: str) -> Optional[CurrentUser]:
    """Resolve the session user from a bearer token, None if invalid"""
    payload = decode_access_token(token)
    if payload is None:
        return None

    try:
        claims = TokenPayload(**payload)
        return CurrentUser.for_role(
            user_id=uuid.UUID(claims.sub),
            business_unit_id=uuid.UUID(claims.business_unit_id),
            role=claims.role,
            name=claims.name,
        )
    except (ValidationError, ValueError):
        return None
