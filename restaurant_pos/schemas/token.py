"""
Pydantic schemas for authentication and tokens
"""

from pydantic import BaseModel, Field
from datetime import datetime

from restaurant_pos.core.clock import utc_now


class TokenPayload(BaseModel):
    """JWT token payload"""
    sub: str = Field(..., description="User ID")
    business_unit_id: str = Field(..., description="Business unit ID")
    role: str = Field(..., description="User role")
    name: str = Field(default="", description="Display name")
    exp: datetime = Field(..., description="Expiration time")
    iat: datetime = Field(default_factory=utc_now, description="Issued at")


class LoginRequest(BaseModel):
    """User login schema"""
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=100)


class TokenResponse(BaseModel):
    """Token response"""
    access_token: str
    token_type: str = "bearer"
    user_id: str
    business_unit_id: str
    role: str
