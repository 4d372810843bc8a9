"""
Tests for fan-in reconciliation of station tickets into orders
"""

from unittest.mock import ANY, patch

from sqlalchemy.dialects import postgresql
from sqlmodel import Session, select

from restaurant_pos.models import (
    Order, OrderItem, OrderItemStatus, OrderStatus, Station, StationTicket, TicketStatus
)
from restaurant_pos.schemas.orders import AdditionalItemsCreate, OrderItemCreate
from restaurant_pos.services.orders import add_items_to_order
from restaurant_pos.services.reconciler import parent_order_query, reconcile_ready, reconcile_served
from restaurant_pos.services.station_tickets import mark_ready, mark_served, start_preparing
from helpers import ticket_id_for


def _item_statuses(db: Session, order_id) -> dict:
    db.expire_all()
    items = db.exec(select(OrderItem).where(OrderItem.order_id == order_id)).all()
    return {item.name: item.status for item in items}


def _order_status(db: Session, order_id) -> OrderStatus:
    db.expire_all()
    return db.get(Order, order_id).status


def _advance_to_ready(db: Session, business_unit_id, ticket_id, user):
    start_preparing(db, business_unit_id, ticket_id, user)
    return mark_ready(db, business_unit_id, ticket_id, user)


def test_order_ready_only_after_both_stations(db: Session, test_business_unit, order_factory, cook):
    """Kitchen first, then bar; the order follows the slower station"""
    bu = test_business_unit.id
    placed = order_factory("burger", "beer")
    order_id = placed.order.id

    kitchen = _advance_to_ready(db, bu, ticket_id_for(placed, Station.KITCHEN), cook)

    assert kitchen.success
    assert kitchen.items_updated == 1
    assert not kitchen.order_ready
    assert _item_statuses(db, order_id) == {
        "Burger": OrderItemStatus.READY,
        "Beer": OrderItemStatus.CONFIRMED,
    }
    assert _order_status(db, order_id) == OrderStatus.CONFIRMED

    bar = _advance_to_ready(db, bu, ticket_id_for(placed, Station.BAR), cook)

    assert bar.order_ready
    assert _item_statuses(db, order_id) == {
        "Burger": OrderItemStatus.READY,
        "Beer": OrderItemStatus.READY,
    }
    assert _order_status(db, order_id) == OrderStatus.READY


def test_served_updates_items_but_not_order(db: Session, test_business_unit, order_factory, cook, waiter):
    bu = test_business_unit.id
    placed = order_factory("burger", "beer")
    kitchen_id = ticket_id_for(placed, Station.KITCHEN)
    _advance_to_ready(db, bu, kitchen_id, cook)
    _advance_to_ready(db, bu, ticket_id_for(placed, Station.BAR), cook)

    result = mark_served(db, bu, kitchen_id, waiter)

    assert result.success
    assert _item_statuses(db, placed.order.id) == {
        "Burger": OrderItemStatus.SERVED,
        "Beer": OrderItemStatus.READY,
    }
    assert _order_status(db, placed.order.id) == OrderStatus.READY


def test_cancelled_item_keeps_order_from_ready(db: Session, test_business_unit, order_factory, cook):
    """Only READY or SERVED items count as done; CANCELLED does not"""
    bu = test_business_unit.id
    placed = order_factory("burger", "beer")
    beer = db.exec(select(OrderItem).where(OrderItem.name == "Beer")).one()
    beer.status = OrderItemStatus.CANCELLED
    db.add(beer)
    db.commit()

    result = _advance_to_ready(db, bu, ticket_id_for(placed, Station.KITCHEN), cook)

    assert result.success
    assert result.items_updated == 1
    assert not result.order_ready
    assert _item_statuses(db, placed.order.id) == {
        "Burger": OrderItemStatus.READY,
        "Beer": OrderItemStatus.CANCELLED,
    }
    assert _order_status(db, placed.order.id) == OrderStatus.CONFIRMED


def test_closed_order_is_not_reopened(db: Session, test_business_unit, order_factory, cook):
    bu = test_business_unit.id
    placed = order_factory("burger")
    order = db.get(Order, placed.order.id)
    order.status = OrderStatus.COMPLETED
    db.add(order)
    db.commit()

    result = _advance_to_ready(db, bu, ticket_id_for(placed, Station.KITCHEN), cook)

    assert result.success
    assert not result.order_ready
    assert _item_statuses(db, placed.order.id) == {"Burger": OrderItemStatus.READY}
    assert _order_status(db, placed.order.id) == OrderStatus.COMPLETED


def test_additional_batch_only_touches_its_own_items(
    db: Session, test_business_unit, test_menu, order_factory, waiter, cook
):
    bu = test_business_unit.id
    placed = order_factory("burger")
    added = add_items_to_order(
        db,
        bu,
        placed.order.id,
        AdditionalItemsCreate(items=[OrderItemCreate(menu_item_id=test_menu["fries"].id)]),
        waiter,
    )
    additional_id = ticket_id_for(added, Station.KITCHEN)

    result = _advance_to_ready(db, bu, additional_id, cook)

    assert result.success
    assert result.items_updated == 1
    assert not result.order_ready
    assert _item_statuses(db, placed.order.id) == {
        "Burger": OrderItemStatus.CONFIRMED,
        "Fries": OrderItemStatus.READY,
    }

    original = _advance_to_ready(db, bu, ticket_id_for(placed, Station.KITCHEN), cook)

    assert original.order_ready
    assert _order_status(db, placed.order.id) == OrderStatus.READY


def test_additional_batch_on_ready_order(db: Session, test_business_unit, test_menu, order_factory, waiter, cook):
    """READY -> IN_PROGRESS when items are added, READY again once they are done"""
    bu = test_business_unit.id
    placed = order_factory("burger")
    _advance_to_ready(db, bu, ticket_id_for(placed, Station.KITCHEN), cook)
    assert _order_status(db, placed.order.id) == OrderStatus.READY

    added = add_items_to_order(
        db,
        bu,
        placed.order.id,
        AdditionalItemsCreate(items=[OrderItemCreate(menu_item_id=test_menu["beer"].id)]),
        waiter,
    )
    assert _order_status(db, placed.order.id) == OrderStatus.IN_PROGRESS

    result = _advance_to_ready(db, bu, ticket_id_for(added, Station.BAR), cook)

    assert result.order_ready
    assert _order_status(db, placed.order.id) == OrderStatus.READY


def test_ticket_without_parent_order_is_a_no_op(db: Session, test_business_unit):
    ticket = StationTicket(
        station=Station.KITCHEN,
        business_unit_id=test_business_unit.id,
        order_number="REST001-99999",
        table_number=1,
        items=[],
        status=TicketStatus.READY,
    )
    db.add(ticket)
    db.commit()

    outcome = reconcile_ready(db, ticket)

    assert outcome.order_id is None
    assert outcome.items_updated == 0
    assert not outcome.order_ready


def test_parent_found_by_number_when_id_missing(db: Session, test_business_unit, order_factory):
    """Legacy tickets without order_id resolve their parent through the number"""
    placed = order_factory("burger", "fries")
    ticket = StationTicket(
        station=Station.KITCHEN,
        business_unit_id=test_business_unit.id,
        order_number=f"{placed.order.order_number}-ADD",
        table_number=5,
        items=[],
        status=TicketStatus.READY,
    )
    db.add(ticket)
    db.commit()

    outcome = reconcile_ready(db, ticket)
    db.commit()

    assert outcome.order_id == placed.order.id
    assert outcome.items_updated == 2
    assert outcome.order_ready


def test_station_without_matching_items_leaves_order_alone(db: Session, test_business_unit, order_factory):
    placed = order_factory("burger")
    ticket = StationTicket(
        station=Station.BAR,
        business_unit_id=test_business_unit.id,
        order_id=placed.order.id,
        order_number=placed.order.order_number,
        table_number=5,
        items=[],
        status=TicketStatus.SERVED,
    )
    db.add(ticket)
    db.commit()

    ready = reconcile_ready(db, ticket)
    served = reconcile_served(db, ticket)
    db.commit()

    assert ready.items_updated == 0
    assert served.items_updated == 0
    assert _item_statuses(db, placed.order.id) == {"Burger": OrderItemStatus.CONFIRMED}
    assert _order_status(db, placed.order.id) == OrderStatus.CONFIRMED


def test_parent_order_lock_compiles_to_for_update(db: Session, test_business_unit, order_factory):
    placed = order_factory("burger")
    by_id = db.get(StationTicket, ticket_id_for(placed, Station.KITCHEN))
    by_number = StationTicket(
        station=Station.KITCHEN,
        business_unit_id=test_business_unit.id,
        order_number=placed.order.order_number,
        table_number=5,
        items=[],
    )

    for ticket in (by_id, by_number):
        locked = str(parent_order_query(ticket, lock=True).compile(dialect=postgresql.dialect()))
        plain = str(parent_order_query(ticket).compile(dialect=postgresql.dialect()))
        assert "FOR UPDATE" in locked
        assert "FOR UPDATE" not in plain


def test_ready_reconciliation_locks_parent_before_items(db: Session, test_business_unit, order_factory, cook):
    """Kitchen and bar going READY at once must see each other's items"""
    bu = test_business_unit.id
    placed = order_factory("burger", "beer")
    ticket_id = ticket_id_for(placed, Station.KITCHEN)
    start_preparing(db, bu, ticket_id, cook)

    with patch(
        "restaurant_pos.services.reconciler.parent_order_query",
        wraps=parent_order_query
    ) as query:
        result = mark_ready(db, bu, ticket_id, cook)

    assert result.success
    query.assert_called_once_with(ANY, lock=True)
