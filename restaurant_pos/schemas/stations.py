"""
Read schemas for the station displays
"""

from pydantic import BaseModel, ValidationError
from sqlmodel import SQLModel
from datetime import datetime
from typing import Any, List, Optional
import uuid

from restaurant_pos.models.station_ticket import Station, StationTicket, TicketStatus


class TicketItemSnapshot(BaseModel):
    """One item as the station saw it when the ticket was printed"""
    id: str
    name: str
    quantity: int
    notes: Optional[str] = None
    prep_time: Optional[int] = None


def parse_ticket_items(raw_items: Any) -> List[TicketItemSnapshot]:
    """Validate a stored JSON snapshot, dropping malformed entries"""
    if not isinstance(raw_items, list):
        return []

    items = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        try:
            items.append(TicketItemSnapshot(**raw))
        except ValidationError:
            continue
    return items


class TicketView(SQLModel):
    """Ticket as listed on a kitchen or bar display"""
    id: uuid.UUID
    station: Station
    order_id: Optional[uuid.UUID] = None
    order_number: str
    table_number: int
    waiter_name: Optional[str] = None
    items: List[TicketItemSnapshot] = []
    item_count: int = 0
    status: TicketStatus
    priority: int
    estimated_time: Optional[int] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    picked_up_at: Optional[datetime] = None
    created_at: datetime
    notes: Optional[str] = None
    is_additional_items: bool = False

    @classmethod
    def from_ticket(cls, ticket: StationTicket) -> "TicketView":
        items = parse_ticket_items(ticket.items)
        return cls(
            id=ticket.id,
            station=ticket.station,
            order_id=ticket.order_id,
            order_number=ticket.order_number,
            table_number=ticket.table_number,
            waiter_name=ticket.waiter_name,
            items=items,
            item_count=sum(item.quantity for item in items),
            status=ticket.status,
            priority=ticket.priority,
            estimated_time=ticket.estimated_time,
            started_at=ticket.started_at,
            completed_at=ticket.completed_at,
            picked_up_at=ticket.picked_up_at,
            created_at=ticket.created_at,
            notes=ticket.notes,
            is_additional_items=ticket.is_additional,
        )


class ForceStatusRequest(SQLModel):
    """Schema for force-setting a ticket status"""
    status: TicketStatus
