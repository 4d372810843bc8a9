"""
Tests for the station ticket state machine
"""

import pytest
from types import SimpleNamespace
from unittest.mock import Mock, patch
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from restaurant_pos.models import AuditLog, OrderItem, OrderItemStatus, Station, TicketStatus
from restaurant_pos.schemas.results import StationErrorCode
from restaurant_pos.services.station_tickets import (
    CONFLICT_MESSAGE,
    force_status,
    mark_picked_up,
    mark_ready,
    mark_served,
    start_preparing,
    transition,
)
from helpers import load_ticket, ticket_id_for


@pytest.fixture
def kitchen_ticket_id(order_factory):
    result = order_factory("burger", "beer")
    return ticket_id_for(result, Station.KITCHEN)


@pytest.fixture
def bar_ticket_id(order_factory):
    result = order_factory("beer")
    return ticket_id_for(result, Station.BAR)


def _audit_rows(db: Session, ticket_id):
    return db.exec(select(AuditLog).where(AuditLog.record_id == str(ticket_id))).all()


class TestForwardTransitions:
    """PENDING -> PREPARING -> READY -> SERVED"""

    def test_full_kitchen_flow(self, db: Session, test_business_unit, kitchen_ticket_id, cook, waiter):
        bu = test_business_unit.id

        result = start_preparing(db, bu, kitchen_ticket_id, cook, Station.KITCHEN)
        assert result.success and result.changed
        assert result.previous_status == TicketStatus.PENDING
        assert result.status == TicketStatus.PREPARING
        ticket = load_ticket(db, kitchen_ticket_id)
        assert ticket.started_at is not None
        assert ticket.completed_at is None
        assert ticket.version == 1

        result = mark_ready(db, bu, kitchen_ticket_id, cook, Station.KITCHEN)
        assert result.success and result.changed
        ticket = load_ticket(db, kitchen_ticket_id)
        assert ticket.status == TicketStatus.READY
        assert ticket.completed_at is not None
        assert ticket.picked_up_at is None

        result = mark_picked_up(db, bu, kitchen_ticket_id, waiter, Station.KITCHEN)
        assert result.success and result.changed
        ticket = load_ticket(db, kitchen_ticket_id)
        assert ticket.status == TicketStatus.SERVED
        assert ticket.picked_up_at is not None
        assert ticket.version == 3

    def test_bar_served_has_no_pickup_time(self, db: Session, test_business_unit, bar_ticket_id, waiter):
        bu = test_business_unit.id
        start_preparing(db, bu, bar_ticket_id, waiter)
        mark_ready(db, bu, bar_ticket_id, waiter)

        result = mark_served(db, bu, bar_ticket_id, waiter)

        assert result.success
        ticket = load_ticket(db, bar_ticket_id)
        assert ticket.status == TicketStatus.SERVED
        assert ticket.completed_at is not None
        assert ticket.picked_up_at is None

    def test_repeat_is_idempotent(self, db: Session, test_business_unit, kitchen_ticket_id, cook):
        bu = test_business_unit.id
        start_preparing(db, bu, kitchen_ticket_id, cook)
        first_started_at = load_ticket(db, kitchen_ticket_id).started_at

        result = start_preparing(db, bu, kitchen_ticket_id, cook)

        assert result.success
        assert not result.changed
        ticket = load_ticket(db, kitchen_ticket_id)
        assert ticket.started_at == first_started_at
        assert ticket.version == 1
        assert len(_audit_rows(db, kitchen_ticket_id)) == 1

    def test_ready_twice_keeps_first_completion_time(self, db: Session, test_business_unit, kitchen_ticket_id, cook):
        bu = test_business_unit.id
        start_preparing(db, bu, kitchen_ticket_id, cook)
        mark_ready(db, bu, kitchen_ticket_id, cook)
        first_completed_at = load_ticket(db, kitchen_ticket_id).completed_at

        result = mark_ready(db, bu, kitchen_ticket_id, cook)

        assert result.success
        assert not result.changed
        assert result.items_updated == 0
        ticket = load_ticket(db, kitchen_ticket_id)
        assert ticket.completed_at == first_completed_at
        assert ticket.version == 2
        assert len(_audit_rows(db, kitchen_ticket_id)) == 2

    def test_each_change_is_audited(self, db: Session, test_business_unit, kitchen_ticket_id, cook):
        start_preparing(db, test_business_unit.id, kitchen_ticket_id, cook)

        rows = _audit_rows(db, kitchen_ticket_id)
        assert len(rows) == 1
        assert rows[0].table_name == "station_tickets"
        assert rows[0].old_values == {"status": "PENDING"}
        assert rows[0].new_values == {"status": "PREPARING"}
        assert rows[0].user_id == cook.id


class TestRejectedTransitions:

    def test_skip_without_force_is_rejected(self, db: Session, test_business_unit, kitchen_ticket_id, cook):
        result = mark_ready(db, test_business_unit.id, kitchen_ticket_id, cook)

        assert not result.success
        assert result.error_code == StationErrorCode.INVALID_TRANSITION
        ticket = load_ticket(db, kitchen_ticket_id)
        assert ticket.status == TicketStatus.PENDING
        assert ticket.completed_at is None

    def test_backward_move_is_rejected(self, db: Session, test_business_unit, kitchen_ticket_id, cook):
        bu = test_business_unit.id
        start_preparing(db, bu, kitchen_ticket_id, cook)
        mark_ready(db, bu, kitchen_ticket_id, cook)

        result = transition(db, bu, kitchen_ticket_id, TicketStatus.PREPARING, cook)

        assert result.error_code == StationErrorCode.INVALID_TRANSITION
        assert load_ticket(db, kitchen_ticket_id).status == TicketStatus.READY

    def test_start_preparing_after_ready_is_rejected(self, db: Session, test_business_unit, kitchen_ticket_id, cook):
        bu = test_business_unit.id
        start_preparing(db, bu, kitchen_ticket_id, cook)
        mark_ready(db, bu, kitchen_ticket_id, cook)

        result = start_preparing(db, bu, kitchen_ticket_id, cook)

        assert not result.success
        assert result.error_code == StationErrorCode.INVALID_TRANSITION
        ticket = load_ticket(db, kitchen_ticket_id)
        assert ticket.status == TicketStatus.READY
        assert ticket.version == 2

    def test_unauthenticated_caller_never_touches_the_store(self, kitchen_ticket_id, test_business_unit):
        session = Mock(spec=Session)

        result = start_preparing(session, test_business_unit.id, kitchen_ticket_id, None)

        assert not result.success
        assert result.error == "Unauthorized"
        assert result.error_code == StationErrorCode.UNAUTHORIZED
        session.exec.assert_not_called()
        session.execute.assert_not_called()
        session.get.assert_not_called()

    def test_unknown_ticket_is_not_found(self, db: Session, test_business_unit, kitchen_ticket_id, cook):
        missing_id = uuid.uuid4()

        result = start_preparing(db, test_business_unit.id, missing_id, cook)

        assert result.error == "Ticket not found"
        assert result.error_code == StationErrorCode.NOT_FOUND
        assert _audit_rows(db, missing_id) == []

    def test_ticket_of_other_business_unit_is_not_found(self, db: Session, other_business_unit, kitchen_ticket_id, cook):
        result = start_preparing(db, other_business_unit.id, kitchen_ticket_id, cook)

        assert result.error_code == StationErrorCode.NOT_FOUND
        assert load_ticket(db, kitchen_ticket_id).status == TicketStatus.PENDING

    def test_ticket_of_other_station_is_not_found(self, db: Session, test_business_unit, kitchen_ticket_id, cook):
        result = start_preparing(db, test_business_unit.id, kitchen_ticket_id, cook, Station.BAR)

        assert result.error_code == StationErrorCode.NOT_FOUND


class TestForceStatus:

    def test_waiter_cannot_force(self, db: Session, test_business_unit, kitchen_ticket_id, waiter):
        result = force_status(db, test_business_unit.id, kitchen_ticket_id, TicketStatus.SERVED, waiter)

        assert result.error_code == StationErrorCode.FORBIDDEN
        assert load_ticket(db, kitchen_ticket_id).status == TicketStatus.PENDING

    def test_manager_force_backfills_timestamps_and_items(self, db: Session, test_business_unit, kitchen_ticket_id, manager):
        result = force_status(db, test_business_unit.id, kitchen_ticket_id, TicketStatus.SERVED, manager)

        assert result.success and result.changed
        ticket = load_ticket(db, kitchen_ticket_id)
        assert ticket.status == TicketStatus.SERVED
        assert ticket.started_at is not None
        assert ticket.completed_at is not None
        assert ticket.picked_up_at is not None
        assert ticket.version == 1

        food = db.exec(select(OrderItem).where(OrderItem.name == "Burger")).one()
        assert food.status == OrderItemStatus.SERVED
        drink = db.exec(select(OrderItem).where(OrderItem.name == "Beer")).one()
        assert drink.status == OrderItemStatus.CONFIRMED

        rows = _audit_rows(db, kitchen_ticket_id)
        assert rows[0].new_values == {"status": "SERVED", "forced": True}

    def test_force_is_still_forward_only(self, db: Session, test_business_unit, kitchen_ticket_id, manager):
        bu = test_business_unit.id
        force_status(db, bu, kitchen_ticket_id, TicketStatus.READY, manager)

        result = force_status(db, bu, kitchen_ticket_id, TicketStatus.PENDING, manager)

        assert result.error_code == StationErrorCode.INVALID_TRANSITION


class TestConcurrencyAndFailures:

    def test_concurrent_change_to_same_target_is_success(self, db: Session, test_business_unit, kitchen_ticket_id, cook):
        bu = test_business_unit.id
        start_preparing(db, bu, kitchen_ticket_id, cook)
        # Another request read the ticket while it was still PENDING
        stale = SimpleNamespace(id=kitchen_ticket_id, status=TicketStatus.PENDING, station=Station.KITCHEN)

        with patch("restaurant_pos.services.station_tickets.get_scoped_ticket", return_value=stale):
            result = start_preparing(db, bu, kitchen_ticket_id, cook)

        assert result.success
        assert not result.changed
        assert load_ticket(db, kitchen_ticket_id).version == 1

    def test_concurrent_change_elsewhere_is_conflict(self, db: Session, test_business_unit, kitchen_ticket_id, manager):
        bu = test_business_unit.id
        force_status(db, bu, kitchen_ticket_id, TicketStatus.READY, manager)
        stale = SimpleNamespace(id=kitchen_ticket_id, status=TicketStatus.PENDING, station=Station.KITCHEN)

        with patch("restaurant_pos.services.station_tickets.get_scoped_ticket", return_value=stale):
            result = start_preparing(db, bu, kitchen_ticket_id, manager)

        assert not result.success
        assert result.error_code == StationErrorCode.CONFLICT
        assert result.error == CONFLICT_MESSAGE
        assert load_ticket(db, kitchen_ticket_id).status == TicketStatus.READY

    def test_reconcile_failure_rolls_back_ticket(self, db: Session, test_business_unit, kitchen_ticket_id, cook):
        bu = test_business_unit.id
        start_preparing(db, bu, kitchen_ticket_id, cook)

        with patch(
            "restaurant_pos.services.station_tickets.reconcile_ready",
            side_effect=SQLAlchemyError("database is locked")
        ):
            result = mark_ready(db, bu, kitchen_ticket_id, cook)

        assert not result.success
        assert result.error_code == StationErrorCode.STORE_FAILURE
        ticket = load_ticket(db, kitchen_ticket_id)
        assert ticket.status == TicketStatus.PREPARING
        assert ticket.completed_at is None
        assert ticket.version == 1

    def test_audit_failure_does_not_fail_transition(self, db: Session, test_business_unit, kitchen_ticket_id, cook):
        with patch("restaurant_pos.services.audit.AuditLog", side_effect=RuntimeError("audit sink down")):
            result = start_preparing(db, test_business_unit.id, kitchen_ticket_id, cook)

        assert result.success
        assert load_ticket(db, kitchen_ticket_id).status == TicketStatus.PREPARING
        assert _audit_rows(db, kitchen_ticket_id) == []
