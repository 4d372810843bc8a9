"""
Business unit model - the restaurant outlet every order belongs to
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import DateTime
from datetime import datetime
import uuid

from restaurant_pos.core.clock import utc_now


class BusinessUnit(SQLModel, table=True):
    """Business unit (outlet) owning tables, menu, orders and stations"""

    __tablename__ = "business_units"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    code: str = Field(
        unique=True,
        index=True,
        max_length=50,
        description="Short code used as order number prefix (e.g. REST001)"
    )
    name: str = Field(max_length=255)
    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
