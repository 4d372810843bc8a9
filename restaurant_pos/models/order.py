"""
Order model for a table visit
Aggregate status is derived from its items by the station reconciler
"""

from sqlmodel import Field, SQLModel, Relationship
from sqlalchemy import DateTime, UniqueConstraint
from datetime import datetime
from typing import Optional, TYPE_CHECKING, List
from decimal import Decimal
from enum import Enum
import uuid

from restaurant_pos.core.clock import utc_now

if TYPE_CHECKING:
    from restaurant_pos.models.order_item import OrderItem


class OrderStatus(str, Enum):
    """Aggregate status of an order"""
    PENDING = "PENDING"             # Draft, not sent to stations
    CONFIRMED = "CONFIRMED"         # Sent to kitchen/bar
    IN_PROGRESS = "IN_PROGRESS"     # Stations working, or new items added
    READY = "READY"                 # Every item ready or served
    SERVED = "SERVED"
    COMPLETED = "COMPLETED"         # Settled, table released
    CANCELLED = "CANCELLED"


# Orders in these states can still be advanced to READY by the reconciler
READY_ADVANCEABLE_STATUSES = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.IN_PROGRESS,
)

# Orders in these states accept an additional-items batch
ADDITIONAL_ITEMS_STATUSES = (
    OrderStatus.CONFIRMED,
    OrderStatus.IN_PROGRESS,
    OrderStatus.READY,
)


class Order(SQLModel, table=True):
    """Customer order for one table visit"""

    __tablename__ = "orders"
    __table_args__ = (
        UniqueConstraint("business_unit_id", "order_number", name="uq_order_business_unit_number"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    business_unit_id: uuid.UUID = Field(
        foreign_key="business_units.id",
        index=True,
        description="Business unit this order belongs to"
    )
    order_number: str = Field(
        max_length=100,
        index=True,
        description="Human readable number, e.g. REST001-10001"
    )

    table_number: int = Field(description="Table the order is served to")
    waiter_id: Optional[uuid.UUID] = Field(
        default=None,
        foreign_key="users.id",
        index=True,
        description="Waiter who placed the order"
    )
    waiter_name: Optional[str] = Field(default=None, max_length=255)

    status: OrderStatus = Field(
        default=OrderStatus.PENDING,
        index=True,
        description="Aggregate status of the order"
    )

    customer_count: Optional[int] = Field(default=None, description="Number of guests")
    notes: Optional[str] = Field(default=None, max_length=2000)

    total_amount: Decimal = Field(
        default=Decimal("0.00"),
        max_digits=12,
        decimal_places=2,
        description="Sum of item totals"
    )

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), index=True)
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    completed_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    items: List["OrderItem"] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )

    def accepts_additional_items(self) -> bool:
        """Check if an additional-items batch can be appended"""
        return self.status in ADDITIONAL_ITEMS_STATUSES

    def can_advance_to_ready(self) -> bool:
        """Check if the reconciler may move this order to READY"""
        return self.status in READY_ADVANCEABLE_STATUSES

    def calculate_total(self) -> Decimal:
        """Recalculate total_amount from the loaded items"""
        self.total_amount = sum(
            (item.total_price for item in self.items),
            Decimal("0.00")
        )
        return self.total_amount
