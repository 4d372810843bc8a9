"""
Fan-out of an order into kitchen and bar tickets
"""

from sqlmodel import Session
from typing import List, Optional, Sequence
import structlog

from restaurant_pos.core.config import get_settings
from restaurant_pos.models.order import Order
from restaurant_pos.models.order_item import OrderItem
from restaurant_pos.models.station_ticket import (
    Station, StationTicket, TicketStatus, TicketPriority
)
from restaurant_pos.services.ticket_numbers import additional_order_number

logger = structlog.get_logger(__name__)
settings = get_settings()


def default_prep_minutes(station: Station) -> int:
    if station == Station.BAR:
        return settings.BAR_DEFAULT_PREP_MINUTES
    return settings.KITCHEN_DEFAULT_PREP_MINUTES


def snapshot_item(item: OrderItem) -> dict:
    """Item as printed on the ticket"""
    return {
        "id": str(item.id),
        "name": item.name,
        "quantity": item.quantity,
        "notes": item.notes,
        "prep_time": item.prep_time,
    }


def create_station_tickets(
    session: Session,
    order: Order,
    items: Optional[Sequence[OrderItem]] = None,
    additional: bool = False
) -> List[StationTicket]:
    """Create one ticket per station that has items to prepare

    ``items`` defaults to every item of the order. The tickets are added to
    the session but not committed.
    """
    if items is None:
        items = order.items

    if additional:
        ticket_number = additional_order_number(order.order_number)
        notes = f"Additional items for {order.order_number}"
    else:
        ticket_number = order.order_number
        notes = order.notes

    tickets = []
    for station in Station:
        station_items = [item for item in items if item.item_type == station.item_type]
        if not station_items:
            continue

        prep_times = [item.prep_time for item in station_items if item.prep_time]
        estimated_time = max(prep_times) if prep_times else default_prep_minutes(station)

        ticket = StationTicket(
            station=station,
            business_unit_id=order.business_unit_id,
            order_id=order.id,
            order_number=ticket_number,
            is_additional=additional,
            table_number=order.table_number,
            waiter_name=order.waiter_name,
            items=[snapshot_item(item) for item in station_items],
            notes=notes,
            status=TicketStatus.PENDING,
            priority=TicketPriority.NORMAL,
            estimated_time=estimated_time,
        )
        session.add(ticket)
        tickets.append(ticket)

    logger.info(
        f"Order {order.order_number}: created {len(tickets)} station tickets"
        + (" (additional items)" if additional else "")
    )
    return tickets
