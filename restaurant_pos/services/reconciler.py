"""
Fan-in reconciliation from station tickets to the parent order

Runs inside the caller's transaction and never commits. When a station
ticket becomes READY its order items are lifted to READY, and the order
becomes READY once every item is ready or served. When a ticket is
SERVED its items follow; the order status is left alone.
"""

from dataclasses import dataclass
from datetime import datetime
from sqlalchemy import update
from sqlmodel import Session, select
from typing import List, Optional
import uuid
import structlog

from restaurant_pos.core.clock import utc_now
from restaurant_pos.models.order import Order, OrderStatus
from restaurant_pos.models.order_item import (
    OrderItem, OrderItemStatus, BELOW_READY_STATUSES, DONE_STATUSES
)
from restaurant_pos.models.station_ticket import Station, StationTicket
from restaurant_pos.services.ticket_numbers import base_order_number

logger = structlog.get_logger(__name__)


@dataclass
class ReconcileOutcome:
    """What a reconciliation pass changed"""
    order_id: Optional[uuid.UUID] = None
    items_updated: int = 0
    order_ready: bool = False


def parent_order_query(ticket: StationTicket, lock: bool = False):
    """Select for the parent order by explicit id, falling back to the ticket number

    With ``lock`` the order row is held until the transaction ends, so
    concurrent station transitions on one order reconcile one after another.
    """
    if ticket.order_id is not None:
        query = select(Order).where(Order.id == ticket.order_id)
    else:
        query = select(Order).where(
            Order.business_unit_id == ticket.business_unit_id,
            Order.order_number == base_order_number(ticket.order_number)
        )

    if lock:
        query = query.with_for_update()
    return query.execution_options(populate_existing=True)


def find_parent_order(session: Session, ticket: StationTicket, lock: bool = False) -> Optional[Order]:
    return session.exec(parent_order_query(ticket, lock=lock)).first()


def matching_item_ids(session: Session, order: Order, ticket: StationTicket) -> List[uuid.UUID]:
    """Order items this ticket is responsible for

    Items of the station's type; narrowed to the snapshot's items when the
    snapshot references items of this order.
    """
    items = session.exec(
        select(OrderItem).where(
            OrderItem.order_id == order.id,
            OrderItem.item_type == Station(ticket.station).item_type
        )
    ).all()

    snapshot_ids = set(ticket.item_ids())
    referenced = [item for item in items if str(item.id) in snapshot_ids]
    if referenced:
        items = referenced

    return [item.id for item in items]


def _order_is_ready(session: Session, order: Order) -> bool:
    statuses = session.exec(
        select(OrderItem.status).where(OrderItem.order_id == order.id)
    ).all()
    return bool(statuses) and all(item_status in DONE_STATUSES for item_status in statuses)


def reconcile_ready(
    session: Session,
    ticket: StationTicket,
    now: Optional[datetime] = None
) -> ReconcileOutcome:
    """Lift the ticket's items to READY and the order when all are done"""
    now = now or utc_now()
    order = find_parent_order(session, ticket, lock=True)
    if order is None:
        logger.warning(f"No parent order for ticket {ticket.id} ({ticket.order_number})")
        return ReconcileOutcome()

    outcome = ReconcileOutcome(order_id=order.id)
    item_ids = matching_item_ids(session, order, ticket)
    if not item_ids:
        logger.info(f"Ticket {ticket.id} has no matching items on order {order.order_number}")
        return outcome

    result = session.execute(
        update(OrderItem)
        .where(
            OrderItem.id.in_(item_ids),
            OrderItem.status.in_(BELOW_READY_STATUSES)
        )
        .values(status=OrderItemStatus.READY, updated_at=now)
        .execution_options(synchronize_session="fetch")
    )
    outcome.items_updated = result.rowcount

    if _order_is_ready(session, order) and order.can_advance_to_ready():
        result = session.execute(
            update(Order)
            .where(
                Order.id == order.id,
                Order.status == order.status
            )
            .values(status=OrderStatus.READY, updated_at=now)
            .execution_options(synchronize_session="fetch")
        )
        outcome.order_ready = result.rowcount == 1

    logger.info(
        f"Reconciled ticket {ticket.id} READY: {outcome.items_updated} items, "
        f"order {order.order_number} ready={outcome.order_ready}"
    )
    return outcome


def reconcile_served(
    session: Session,
    ticket: StationTicket,
    now: Optional[datetime] = None
) -> ReconcileOutcome:
    """Mark the ticket's items SERVED, leaving the order status as is"""
    now = now or utc_now()
    order = find_parent_order(session, ticket)
    if order is None:
        logger.warning(f"No parent order for ticket {ticket.id} ({ticket.order_number})")
        return ReconcileOutcome()

    outcome = ReconcileOutcome(order_id=order.id)
    item_ids = matching_item_ids(session, order, ticket)
    if not item_ids:
        return outcome

    result = session.execute(
        update(OrderItem)
        .where(
            OrderItem.id.in_(item_ids),
            OrderItem.status.notin_([OrderItemStatus.SERVED, OrderItemStatus.CANCELLED])
        )
        .values(status=OrderItemStatus.SERVED, updated_at=now)
        .execution_options(synchronize_session="fetch")
    )
    outcome.items_updated = result.rowcount

    logger.info(f"Reconciled ticket {ticket.id} SERVED: {outcome.items_updated} items")
    return outcome
