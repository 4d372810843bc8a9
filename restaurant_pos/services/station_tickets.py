"""
Station ticket state machine

Tickets move strictly forward: PENDING -> PREPARING -> READY -> SERVED.
The status change, its timestamps and the fan-in reconciliation of the
parent order are committed together; the audit record follows separately.
"""

from datetime import datetime
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
from typing import Optional
import uuid
import structlog

from restaurant_pos.core.clock import utc_now
from restaurant_pos.core.permissions import CurrentUser, Permission
from restaurant_pos.models.audit_log import AuditAction
from restaurant_pos.models.station_ticket import (
    Station, StationTicket, TicketStatus, TICKET_FLOW
)
from restaurant_pos.schemas.results import StationErrorCode, TransitionResult
from restaurant_pos.services.audit import record_audit
from restaurant_pos.services.reconciler import reconcile_ready, reconcile_served
from restaurant_pos.services.ticket_numbers import business_unit_ticket_numbers

logger = structlog.get_logger(__name__)

CONFLICT_MESSAGE = "Ticket was modified by another user. Please refresh and try again."

# Timestamp written the first time a ticket enters each status
TIMESTAMP_COLUMNS = {
    TicketStatus.PREPARING: "started_at",
    TicketStatus.READY: "completed_at",
    TicketStatus.SERVED: "picked_up_at",
}


def get_scoped_ticket(
    session: Session,
    business_unit_id: uuid.UUID,
    ticket_id: uuid.UUID,
    station: Optional[Station] = None
) -> Optional[StationTicket]:
    """Load a ticket only if it belongs to one of the business unit's orders"""
    ticket_numbers = business_unit_ticket_numbers(session, business_unit_id)
    if not ticket_numbers:
        return None

    query = select(StationTicket).where(
        StationTicket.id == ticket_id,
        StationTicket.business_unit_id == business_unit_id,
        StationTicket.order_number.in_(ticket_numbers)
    )
    if station is not None:
        query = query.where(StationTicket.station == Station(station))

    return session.exec(query).first()


def _stamp(session: Session, ticket: StationTicket, status: TicketStatus, now: datetime) -> None:
    column_name = TIMESTAMP_COLUMNS.get(status)
    if column_name is None:
        return
    # Pickup is only tracked for the kitchen pass
    if column_name == "picked_up_at" and Station(ticket.station) != Station.KITCHEN:
        return

    column = getattr(StationTicket, column_name)
    session.execute(
        update(StationTicket)
        .where(StationTicket.id == ticket.id, column.is_(None))
        .values({column_name: now})
        .execution_options(synchronize_session="fetch")
    )


def transition(
    session: Session,
    business_unit_id: uuid.UUID,
    ticket_id: uuid.UUID,
    target: TicketStatus,
    user: Optional[CurrentUser],
    station: Optional[Station] = None,
    force: bool = False
) -> TransitionResult:
    """Move a ticket to ``target``

    Repeating the current status succeeds without changes. Moving backwards
    is always rejected; skipping a status requires ``force``, which
    back-fills the timestamps and reconciliation of the skipped statuses.
    """
    if user is None:
        return TransitionResult.fail(StationErrorCode.UNAUTHORIZED, "Unauthorized", ticket_id=ticket_id)

    if not user.can(Permission.STATION_UPDATE):
        return TransitionResult.fail(
            StationErrorCode.FORBIDDEN,
            "You are not allowed to update station tickets",
            ticket_id=ticket_id
        )

    if force and not user.can(Permission.TICKET_FORCE_STATUS):
        return TransitionResult.fail(
            StationErrorCode.FORBIDDEN,
            "Only managers can force a ticket status",
            ticket_id=ticket_id
        )

    target = TicketStatus(target)

    try:
        ticket = get_scoped_ticket(session, business_unit_id, ticket_id, station)
    except SQLAlchemyError as e:
        logger.error(f"Error loading ticket {ticket_id}: {e}")
        return TransitionResult.fail(StationErrorCode.STORE_FAILURE, "Failed to update ticket", ticket_id=ticket_id)

    if ticket is None:
        return TransitionResult.fail(StationErrorCode.NOT_FOUND, "Ticket not found", ticket_id=ticket_id)

    current = TicketStatus(ticket.status)

    if current == target:
        return TransitionResult.ok(
            ticket_id=ticket.id,
            previous_status=current,
            status=current,
        )

    if target.rank < current.rank:
        return TransitionResult.fail(
            StationErrorCode.INVALID_TRANSITION,
            f"Cannot move ticket from {current.value} back to {target.value}",
            ticket_id=ticket.id,
            previous_status=current,
            status=current,
        )

    if target.rank - current.rank > 1 and not force:
        next_status = TICKET_FLOW[current.rank + 1]
        return TransitionResult.fail(
            StationErrorCode.INVALID_TRANSITION,
            f"Ticket must be {next_status.value} before it can be {target.value}",
            ticket_id=ticket.id,
            previous_status=current,
            status=current,
        )

    now = utc_now()
    items_updated = 0
    order_ready = False

    try:
        # Compare-and-set against the status we validated
        result = session.execute(
            update(StationTicket)
            .where(
                StationTicket.id == ticket.id,
                StationTicket.status == current
            )
            .values(
                status=target,
                version=StationTicket.version + 1,
                updated_at=now
            )
            .execution_options(synchronize_session="fetch")
        )

        if result.rowcount == 0:
            session.rollback()
            latest = session.get(StationTicket, ticket_id)
            if latest is not None and TicketStatus(latest.status) == target:
                return TransitionResult.ok(
                    ticket_id=ticket_id,
                    previous_status=target,
                    status=target,
                )
            logger.warning(f"Concurrent update on ticket {ticket_id}, expected {current.value}")
            return TransitionResult.fail(
                StationErrorCode.CONFLICT,
                CONFLICT_MESSAGE,
                ticket_id=ticket_id,
                previous_status=current,
            )

        for step in TICKET_FLOW[current.rank + 1:target.rank + 1]:
            _stamp(session, ticket, step, now)
            if step == TicketStatus.READY:
                outcome = reconcile_ready(session, ticket, now)
                items_updated += outcome.items_updated
                order_ready = order_ready or outcome.order_ready
            elif step == TicketStatus.SERVED:
                outcome = reconcile_served(session, ticket, now)
                items_updated += outcome.items_updated

        session.commit()

    except Exception as e:
        session.rollback()
        logger.error(f"Error updating ticket {ticket_id} to {target.value}: {e}")
        return TransitionResult.fail(
            StationErrorCode.STORE_FAILURE,
            "Failed to update ticket",
            ticket_id=ticket_id,
            previous_status=current,
        )

    logger.info(
        f"Ticket {ticket_id} {current.value} -> {target.value} by user {user.id}"
        + (" (forced)" if force else "")
    )

    record_audit(
        session,
        business_unit_id=business_unit_id,
        table_name="station_tickets",
        record_id=ticket_id,
        action=AuditAction.UPDATE,
        old_values={"status": current.value},
        new_values={"status": target.value, "forced": force} if force else {"status": target.value},
        user_id=user.id,
    )

    return TransitionResult.ok(
        ticket_id=ticket_id,
        previous_status=current,
        status=target,
        changed=True,
        items_updated=items_updated,
        order_ready=order_ready,
    )


def start_preparing(session, business_unit_id, ticket_id, user, station=None) -> TransitionResult:
    return transition(session, business_unit_id, ticket_id, TicketStatus.PREPARING, user, station)


def mark_ready(session, business_unit_id, ticket_id, user, station=None) -> TransitionResult:
    """Mark a ticket READY and reconcile its order"""
    return transition(session, business_unit_id, ticket_id, TicketStatus.READY, user, station)


def mark_served(session, business_unit_id, ticket_id, user, station=None) -> TransitionResult:
    """Mark a ticket SERVED (picked up from the pass)"""
    return transition(session, business_unit_id, ticket_id, TicketStatus.SERVED, user, station)


mark_picked_up = mark_served


def force_status(
    session: Session,
    business_unit_id: uuid.UUID,
    ticket_id: uuid.UUID,
    target: TicketStatus,
    user: Optional[CurrentUser],
    station: Optional[Station] = None
) -> TransitionResult:
    """Skip ahead to ``target``; managers only, still forward-only"""
    return transition(session, business_unit_id, ticket_id, target, user, station, force=True)
