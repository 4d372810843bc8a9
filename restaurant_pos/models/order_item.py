"""
Order item model
One line of an order with menu snapshots
"""

from sqlmodel import Field, SQLModel, Relationship
from sqlalchemy import DateTime
from decimal import Decimal
from datetime import datetime
from typing import Optional, TYPE_CHECKING
from enum import Enum
import uuid

from restaurant_pos.core.clock import utc_now
from restaurant_pos.models.menu_item import ItemType

if TYPE_CHECKING:
    from restaurant_pos.models.order import Order


class OrderItemStatus(str, Enum):
    """Status of a single order line"""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PREPARING = "PREPARING"
    READY = "READY"
    SERVED = "SERVED"
    CANCELLED = "CANCELLED"


# Statuses the reconciler may lift to READY
BELOW_READY_STATUSES = (
    OrderItemStatus.PENDING,
    OrderItemStatus.CONFIRMED,
    OrderItemStatus.PREPARING,
)

# Statuses counted as done when deciding whether the order is ready
DONE_STATUSES = (
    OrderItemStatus.READY,
    OrderItemStatus.SERVED,
)


class OrderItem(SQLModel, table=True):
    """Individual line item of an order"""

    __tablename__ = "order_items"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
        description="Order this item belongs to"
    )
    menu_item_id: uuid.UUID = Field(
        foreign_key="menu_items.id",
        index=True,
        description="Menu item this line represents"
    )

    # Snapshot from menu at time of order
    name: str = Field(max_length=255, description="Item name (snapshot from menu)")
    item_type: ItemType = Field(
        index=True,
        description="Item type (snapshot from menu), decides the station"
    )
    prep_time: Optional[int] = Field(default=None, description="Prep time in minutes (snapshot)")

    quantity: int = Field(default=1, description="Quantity ordered")
    unit_price: Decimal = Field(
        default=Decimal("0.00"),
        max_digits=10,
        decimal_places=2,
        description="Unit price at time of order (snapshot)"
    )
    total_price: Decimal = Field(
        default=Decimal("0.00"),
        max_digits=10,
        decimal_places=2,
        description="quantity * unit_price"
    )

    status: OrderItemStatus = Field(
        default=OrderItemStatus.PENDING,
        index=True,
        description="Advanced only by station reconciliation"
    )
    notes: Optional[str] = Field(default=None, max_length=1000)
    is_additional: bool = Field(
        default=False,
        description="Added after the order was placed (additional-items batch)"
    )

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    order: Optional["Order"] = Relationship(back_populates="items")

    def calculate_line_total(self) -> Decimal:
        """Calculate line total based on quantity and price"""
        self.total_price = self.unit_price * Decimal(self.quantity)
        return self.total_price
