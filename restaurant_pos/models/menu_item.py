"""
Menu item model (reference data consumed by ordering)
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import DateTime
from decimal import Decimal
from datetime import datetime
from typing import Optional
from enum import Enum
import uuid

from restaurant_pos.core.clock import utc_now


class ItemType(str, Enum):
    """Type of menu item, decides which station prepares it"""
    FOOD = "FOOD"
    DRINK = "DRINK"


class MenuItem(SQLModel, table=True):
    """Menu item for ordering"""

    __tablename__ = "menu_items"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    business_unit_id: uuid.UUID = Field(
        foreign_key="business_units.id",
        index=True,
        description="Business unit this item is sold at"
    )

    name: str = Field(max_length=255, nullable=False, description="Item name")
    description: Optional[str] = Field(default=None, max_length=2000, description="Item description")

    price: Decimal = Field(
        default=Decimal("0.00"),
        max_digits=10,
        decimal_places=2,
        description="Base price of item"
    )

    item_type: ItemType = Field(
        default=ItemType.FOOD,
        index=True,
        description="FOOD goes to the kitchen, DRINK goes to the bar"
    )
    prep_time: Optional[int] = Field(
        default=None,
        description="Preparation time in minutes"
    )

    is_available: bool = Field(default=True, index=True, description="Whether item is currently available")

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
