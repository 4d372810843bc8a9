"""
User model with roles and business unit scoping
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import DateTime
from datetime import datetime
from typing import Optional
from enum import Enum
import uuid

from restaurant_pos.core.clock import utc_now


class UserRole(str, Enum):
    """User roles for RBAC"""
    ADMIN = "admin"
    MANAGER = "manager"
    WAITER = "waiter"
    CASHIER = "cashier"
    KITCHEN = "kitchen"
    BAR = "bar"


class User(SQLModel, table=True):
    """Staff member of a business unit"""

    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    business_unit_id: uuid.UUID = Field(
        foreign_key="business_units.id",
        index=True,
        description="Business unit the user works for"
    )

    # Authentication
    email: str = Field(unique=True, index=True, nullable=False, max_length=255)
    password_hash: str = Field(default="", nullable=False)

    # Profile
    name: str = Field(nullable=False, max_length=255)

    # RBAC
    role: UserRole = Field(default=UserRole.WAITER, nullable=False, index=True)

    # Status
    is_active: bool = Field(default=True, index=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    last_login_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
