"""
Station display feeds

Read-only queries behind the kitchen and bar screens. A failed read is
logged and shown as an empty list.
"""

from datetime import datetime, timedelta
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
from typing import List, Optional
import uuid
import structlog

from restaurant_pos.core.clock import utc_now
from restaurant_pos.core.config import get_settings
from restaurant_pos.models.station_ticket import (
    Station, StationTicket, TicketStatus, ACTIVE_TICKET_STATUSES
)
from restaurant_pos.schemas.stations import TicketView
from restaurant_pos.services.ticket_numbers import business_unit_ticket_numbers

logger = structlog.get_logger(__name__)
settings = get_settings()


def list_active(
    session: Session,
    business_unit_id: uuid.UUID,
    station: Station
) -> List[TicketView]:
    """Open tickets of a station, most urgent first, then oldest first"""
    station = Station(station)
    try:
        ticket_numbers = business_unit_ticket_numbers(session, business_unit_id)
        if not ticket_numbers:
            return []

        tickets = session.exec(
            select(StationTicket)
            .where(
                StationTicket.station == station,
                StationTicket.order_number.in_(ticket_numbers),
                StationTicket.status.in_(ACTIVE_TICKET_STATUSES)
            )
            .order_by(StationTicket.priority.desc(), StationTicket.created_at.asc())
        ).all()
        return [TicketView.from_ticket(ticket) for ticket in tickets]

    except SQLAlchemyError as e:
        logger.error(f"Error loading active {station.value} tickets: {e}")
        return []


def list_completed(
    session: Session,
    business_unit_id: uuid.UUID,
    station: Station,
    now: Optional[datetime] = None
) -> List[TicketView]:
    """Served tickets created within the lookback window, latest completion first"""
    station = Station(station)
    now = now or utc_now()
    since = now - timedelta(hours=settings.COMPLETED_LOOKBACK_HOURS)
    try:
        ticket_numbers = business_unit_ticket_numbers(session, business_unit_id)
        if not ticket_numbers:
            return []

        tickets = session.exec(
            select(StationTicket)
            .where(
                StationTicket.station == station,
                StationTicket.order_number.in_(ticket_numbers),
                StationTicket.status == TicketStatus.SERVED,
                StationTicket.created_at >= since
            )
            .order_by(StationTicket.completed_at.desc(), StationTicket.created_at.desc())
        ).all()
        return [TicketView.from_ticket(ticket) for ticket in tickets]

    except SQLAlchemyError as e:
        logger.error(f"Error loading completed {station.value} tickets: {e}")
        return []


def list_ready_for_pickup(session: Session, business_unit_id: uuid.UUID) -> List[TicketView]:
    """Kitchen tickets waiting at the pass, longest waiting first"""
    try:
        ticket_numbers = business_unit_ticket_numbers(session, business_unit_id)
        if not ticket_numbers:
            return []

        tickets = session.exec(
            select(StationTicket)
            .where(
                StationTicket.station == Station.KITCHEN,
                StationTicket.order_number.in_(ticket_numbers),
                StationTicket.status == TicketStatus.READY
            )
            .order_by(StationTicket.completed_at.asc(), StationTicket.created_at.asc())
        ).all()
        return [TicketView.from_ticket(ticket) for ticket in tickets]

    except SQLAlchemyError as e:
        logger.error(f"Error loading tickets ready for pickup: {e}")
        return []
