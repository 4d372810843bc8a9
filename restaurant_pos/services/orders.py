"""
Order placement and additional-items batches
"""

from sqlmodel import Session, select
from typing import Dict, List, Optional, Sequence
import uuid
import structlog

from restaurant_pos.core.clock import utc_now
from restaurant_pos.core.config import get_settings
from restaurant_pos.core.permissions import CurrentUser, Permission
from restaurant_pos.models.audit_log import AuditAction
from restaurant_pos.models.business_unit import BusinessUnit
from restaurant_pos.models.menu_item import MenuItem
from restaurant_pos.models.order import Order, OrderStatus
from restaurant_pos.models.order_item import OrderItem, OrderItemStatus
from restaurant_pos.schemas.orders import (
    AdditionalItemsCreate, OrderCreate, OrderItemCreate, OrderRead
)
from restaurant_pos.schemas.results import OrderResult, StationErrorCode
from restaurant_pos.schemas.stations import TicketView
from restaurant_pos.services.audit import record_audit
from restaurant_pos.services.ticket_creation import create_station_tickets

logger = structlog.get_logger(__name__)
settings = get_settings()


class OrderValidationError(Exception):
    """Requested items cannot be ordered"""
    pass


def generate_order_number(session: Session, business_unit: BusinessUnit) -> str:
    """Next ``{code}-{n}`` number for the business unit"""
    prefix = f"{business_unit.code}-"
    existing = session.exec(
        select(Order.order_number).where(
            Order.business_unit_id == business_unit.id,
            Order.order_number.startswith(prefix)
        )
    ).all()

    highest = None
    for number in existing:
        suffix = number[len(prefix):]
        if suffix.isdigit():
            highest = max(highest or 0, int(suffix))

    next_number = highest + 1 if highest is not None else settings.ORDER_NUMBER_START
    return f"{prefix}{next_number}"


def get_order(session: Session, business_unit_id: uuid.UUID, order_id: uuid.UUID) -> Optional[Order]:
    return session.exec(
        select(Order).where(
            Order.id == order_id,
            Order.business_unit_id == business_unit_id
        )
    ).first()


def _build_items(
    session: Session,
    business_unit_id: uuid.UUID,
    requested: Sequence[OrderItemCreate],
    order_id: uuid.UUID,
    additional: bool
) -> List[OrderItem]:
    """Order items with name, type and price snapshots from the menu"""
    if not requested:
        raise OrderValidationError("Order must contain at least one item")

    menu_item_ids = {line.menu_item_id for line in requested}
    menu_items: Dict[uuid.UUID, MenuItem] = {
        menu_item.id: menu_item
        for menu_item in session.exec(
            select(MenuItem).where(
                MenuItem.id.in_(menu_item_ids),
                MenuItem.business_unit_id == business_unit_id,
                MenuItem.is_available == True  # noqa: E712
            )
        ).all()
    }

    items = []
    for line in requested:
        menu_item = menu_items.get(line.menu_item_id)
        if menu_item is None:
            raise OrderValidationError(f"Menu item {line.menu_item_id} is not available")
        if line.quantity < 1:
            raise OrderValidationError("Quantity must be at least 1")

        item = OrderItem(
            order_id=order_id,
            menu_item_id=menu_item.id,
            name=menu_item.name,
            item_type=menu_item.item_type,
            prep_time=menu_item.prep_time,
            quantity=line.quantity,
            unit_price=menu_item.price,
            status=OrderItemStatus.CONFIRMED,
            notes=line.notes,
            is_additional=additional,
        )
        item.calculate_line_total()
        items.append(item)
    return items


def place_order(
    session: Session,
    business_unit_id: uuid.UUID,
    order_data: OrderCreate,
    user: Optional[CurrentUser]
) -> OrderResult:
    """Create an order, its items and its station tickets in one commit"""
    if user is None:
        return OrderResult.fail(StationErrorCode.UNAUTHORIZED, "Unauthorized")

    if not user.can(Permission.ORDER_CREATE):
        return OrderResult.fail(StationErrorCode.FORBIDDEN, "You are not allowed to place orders")

    try:
        business_unit = session.get(BusinessUnit, business_unit_id)
        if business_unit is None or not business_unit.is_active:
            return OrderResult.fail(StationErrorCode.NOT_FOUND, "Business unit not found")

        order = Order(
            business_unit_id=business_unit_id,
            order_number=generate_order_number(session, business_unit),
            table_number=order_data.table_number,
            waiter_id=user.id,
            waiter_name=user.name or None,
            status=OrderStatus.CONFIRMED,
            customer_count=order_data.customer_count,
            notes=order_data.notes,
        )
        order.items = _build_items(session, business_unit_id, order_data.items, order.id, additional=False)
        order.calculate_total()
        session.add(order)
        session.flush()

        tickets = create_station_tickets(session, order)
        session.commit()
        session.refresh(order)

    except OrderValidationError as e:
        session.rollback()
        return OrderResult.fail(StationErrorCode.VALIDATION, str(e))
    except Exception as e:
        session.rollback()
        logger.error(f"Error placing order: {e}")
        return OrderResult.fail(StationErrorCode.STORE_FAILURE, "Failed to place order")

    logger.info(f"Order {order.order_number} placed with {len(order.items)} items by user {user.id}")

    order_read = OrderRead.from_order(order)
    ticket_views = [TicketView.from_ticket(ticket) for ticket in tickets]

    record_audit(
        session,
        business_unit_id=business_unit_id,
        table_name="orders",
        record_id=order_read.id,
        action=AuditAction.CREATE,
        new_values={
            "order_number": order_read.order_number,
            "table_number": order_read.table_number,
            "total_amount": str(order_read.total_amount),
        },
        user_id=user.id,
    )

    return OrderResult.ok(order=order_read, tickets=ticket_views)


def add_items_to_order(
    session: Session,
    business_unit_id: uuid.UUID,
    order_id: uuid.UUID,
    items_data: AdditionalItemsCreate,
    user: Optional[CurrentUser]
) -> OrderResult:
    """Append an additional-items batch and send it to the stations

    The batch gets its own tickets under the suffixed order number. A READY
    order goes back to IN_PROGRESS until the new items are ready too.
    """
    if user is None:
        return OrderResult.fail(StationErrorCode.UNAUTHORIZED, "Unauthorized")

    if not user.can(Permission.ORDER_ADD_ITEMS):
        return OrderResult.fail(StationErrorCode.FORBIDDEN, "You are not allowed to add items to orders")

    try:
        order = get_order(session, business_unit_id, order_id)
        if order is None:
            return OrderResult.fail(StationErrorCode.NOT_FOUND, "Order not found")

        if not order.accepts_additional_items():
            return OrderResult.fail(
                StationErrorCode.INVALID_TRANSITION,
                f"Cannot add items to an order that is {order.status.value}"
            )

        previous_status = order.status
        new_items = _build_items(session, business_unit_id, items_data.items, order.id, additional=True)
        order.items.extend(new_items)
        order.calculate_total()
        if order.status == OrderStatus.READY:
            order.status = OrderStatus.IN_PROGRESS
        order.updated_at = utc_now()
        session.add(order)
        session.flush()

        tickets = create_station_tickets(session, order, new_items, additional=True)
        session.commit()
        session.refresh(order)

    except OrderValidationError as e:
        session.rollback()
        return OrderResult.fail(StationErrorCode.VALIDATION, str(e))
    except Exception as e:
        session.rollback()
        logger.error(f"Error adding items to order {order_id}: {e}")
        return OrderResult.fail(StationErrorCode.STORE_FAILURE, "Failed to add items")

    logger.info(f"Added {len(new_items)} items to order {order.order_number} by user {user.id}")

    order_read = OrderRead.from_order(order)
    ticket_views = [TicketView.from_ticket(ticket) for ticket in tickets]

    record_audit(
        session,
        business_unit_id=business_unit_id,
        table_name="orders",
        record_id=order_read.id,
        action=AuditAction.UPDATE,
        old_values={"status": previous_status.value},
        new_values={
            "status": order_read.status.value,
            "added_items": len(new_items),
            "total_amount": str(order_read.total_amount),
        },
        user_id=user.id,
    )

    return OrderResult.ok(order=order_read, tickets=ticket_views)
