"""
Station ticket model for kitchen and bar displays
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import Column, DateTime, JSON
from datetime import datetime
from typing import Optional, List, Dict, Any
from enum import Enum, IntEnum
import uuid

from restaurant_pos.core.clock import utc_now
from restaurant_pos.models.menu_item import ItemType


class Station(str, Enum):
    """Fulfillment station a ticket is routed to"""
    KITCHEN = "kitchen"
    BAR = "bar"

    @property
    def item_type(self) -> ItemType:
        """Menu item type prepared at this station"""
        return STATION_ITEM_TYPES[self]


STATION_ITEM_TYPES = {
    Station.KITCHEN: ItemType.FOOD,
    Station.BAR: ItemType.DRINK,
}


class TicketStatus(str, Enum):
    """Status of a station ticket"""
    PENDING = "PENDING"             # Waiting for station staff
    PREPARING = "PREPARING"         # Station is working on it
    READY = "READY"                 # Waiting to be picked up
    SERVED = "SERVED"               # Picked up by waiter / served

    @property
    def rank(self) -> int:
        """Position in the forward-only ticket flow"""
        return TICKET_FLOW.index(self)


TICKET_FLOW = [
    TicketStatus.PENDING,
    TicketStatus.PREPARING,
    TicketStatus.READY,
    TicketStatus.SERVED,
]

ACTIVE_TICKET_STATUSES = (
    TicketStatus.PENDING,
    TicketStatus.PREPARING,
    TicketStatus.READY,
)


class TicketPriority(IntEnum):
    """Priority band, higher is served first"""
    LOW = 0
    NORMAL = 1
    HIGH = 2
    URGENT = 3


class StationTicket(SQLModel, table=True):
    """Kitchen or bar ticket shown on a station display

    The ``items`` column is a snapshot taken when the ticket is created and
    is never rewritten; the parent order is linked by ``order_id`` and by the
    shared ``order_number`` (suffixed for additional-items batches).
    """

    __tablename__ = "station_tickets"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    station: Station = Field(index=True, description="Station this ticket is for")
    business_unit_id: uuid.UUID = Field(
        foreign_key="business_units.id",
        index=True,
        description="Business unit of the parent order"
    )
    order_id: Optional[uuid.UUID] = Field(
        default=None,
        foreign_key="orders.id",
        index=True,
        description="Parent order, fixed at creation"
    )
    order_number: str = Field(
        max_length=100,
        index=True,
        description="Parent order number, or its additional-items variant"
    )
    is_additional: bool = Field(
        default=False,
        description="Ticket for an additional-items batch"
    )

    # Display information
    table_number: int = Field(description="Table number for display")
    waiter_name: Optional[str] = Field(default=None, max_length=255)
    items: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Item snapshot: [{'id', 'name', 'quantity', 'notes', 'prep_time'}]",
        sa_column=Column(JSON, nullable=False)
    )
    notes: Optional[str] = Field(default=None, max_length=2000)

    status: TicketStatus = Field(
        default=TicketStatus.PENDING,
        index=True,
        description="Current status of the ticket"
    )
    priority: int = Field(
        default=TicketPriority.NORMAL,
        index=True,
        description="Priority band (higher = more urgent)"
    )
    estimated_time: Optional[int] = Field(
        default=None,
        description="Estimated preparation time in minutes"
    )

    # Timing
    started_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True), description="First entry to PREPARING")
    completed_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True), description="First entry to READY")
    picked_up_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True), description="Picked up by waiter (kitchen)")

    version: int = Field(default=0, description="Incremented on every status change")
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), index=True)
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    def item_ids(self) -> List[str]:
        """Order item ids referenced by the snapshot"""
        return [str(item["id"]) for item in self.items if isinstance(item, dict) and item.get("id")]
