"""
Station display API endpoints for kitchen and bar tickets
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session
from typing import List, Optional
import structlog
import uuid

from restaurant_pos.api import result_response
from restaurant_pos.core.database import get_session
from restaurant_pos.core.dependencies import check_business_unit, get_current_user
from restaurant_pos.core.events import OrderReady, TicketStatusChanged, event_bus
from restaurant_pos.core.permissions import CurrentUser, Permission
from restaurant_pos.models.station_ticket import Station, TicketStatus
from restaurant_pos.schemas.results import TransitionResult
from restaurant_pos.schemas.stations import ForceStatusRequest, TicketView
from restaurant_pos.services import station_feed, station_tickets

logger = structlog.get_logger(__name__)
router = APIRouter()


def _require_viewer(business_unit_id: uuid.UUID, user: Optional[CurrentUser]) -> CurrentUser:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    check_business_unit(business_unit_id, user)
    if not user.can(Permission.STATION_VIEW):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Permission required: {Permission.STATION_VIEW.value}",
        )
    return user


async def _publish_transition(
    business_unit_id: uuid.UUID,
    station: Station,
    result: TransitionResult,
    user: CurrentUser
) -> None:
    """Notify printers and waiter screens about an applied change"""
    if not (result.success and result.changed):
        return

    await event_bus.publish(TicketStatusChanged(
        ticket_id=result.ticket_id,
        business_unit_id=business_unit_id,
        station=station.value,
        old_status=result.previous_status.value,
        new_status=result.status.value,
        changed_by=user.id,
    ))


async def _respond(
    business_unit_id: uuid.UUID,
    station: Station,
    result: TransitionResult,
    user: Optional[CurrentUser],
    session: Session
):
    if user is not None:
        await _publish_transition(business_unit_id, station, result, user)
        if result.success and result.order_ready:
            ticket = station_tickets.get_scoped_ticket(session, business_unit_id, result.ticket_id)
            if ticket is not None and ticket.order_id is not None:
                await event_bus.publish(OrderReady(
                    order_id=ticket.order_id,
                    business_unit_id=business_unit_id,
                ))
    return result_response(result)


@router.get("/{station}/tickets", response_model=List[TicketView])
async def list_active_tickets(
    business_unit_id: uuid.UUID,
    station: Station,
    user: Optional[CurrentUser] = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Open tickets for a station display"""
    _require_viewer(business_unit_id, user)
    return station_feed.list_active(session, business_unit_id, station)


@router.get("/{station}/tickets/completed", response_model=List[TicketView])
async def list_completed_tickets(
    business_unit_id: uuid.UUID,
    station: Station,
    user: Optional[CurrentUser] = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Tickets served within the completed-feed window"""
    _require_viewer(business_unit_id, user)
    return station_feed.list_completed(session, business_unit_id, station)


@router.get("/kitchen/ready-for-pickup", response_model=List[TicketView])
async def list_ready_for_pickup(
    business_unit_id: uuid.UUID,
    user: Optional[CurrentUser] = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Kitchen tickets waiting for a waiter"""
    _require_viewer(business_unit_id, user)
    return station_feed.list_ready_for_pickup(session, business_unit_id)


@router.post("/{station}/tickets/{ticket_id}/start", response_model=TransitionResult)
async def start_ticket(
    business_unit_id: uuid.UUID,
    station: Station,
    ticket_id: uuid.UUID,
    user: Optional[CurrentUser] = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Move a ticket from PENDING to PREPARING"""
    check_business_unit(business_unit_id, user)
    result = station_tickets.start_preparing(session, business_unit_id, ticket_id, user, station)
    return await _respond(business_unit_id, station, result, user, session)


@router.post("/{station}/tickets/{ticket_id}/ready", response_model=TransitionResult)
async def ready_ticket(
    business_unit_id: uuid.UUID,
    station: Station,
    ticket_id: uuid.UUID,
    user: Optional[CurrentUser] = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Move a ticket from PREPARING to READY"""
    check_business_unit(business_unit_id, user)
    result = station_tickets.mark_ready(session, business_unit_id, ticket_id, user, station)
    return await _respond(business_unit_id, station, result, user, session)


@router.post("/{station}/tickets/{ticket_id}/served", response_model=TransitionResult)
async def serve_ticket(
    business_unit_id: uuid.UUID,
    station: Station,
    ticket_id: uuid.UUID,
    user: Optional[CurrentUser] = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Move a ticket from READY to SERVED"""
    check_business_unit(business_unit_id, user)
    result = station_tickets.mark_served(session, business_unit_id, ticket_id, user, station)
    return await _respond(business_unit_id, station, result, user, session)


@router.post("/{station}/tickets/{ticket_id}/picked-up", response_model=TransitionResult)
async def pick_up_ticket(
    business_unit_id: uuid.UUID,
    station: Station,
    ticket_id: uuid.UUID,
    user: Optional[CurrentUser] = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Waiter picked the ticket up from the pass"""
    check_business_unit(business_unit_id, user)
    result = station_tickets.mark_picked_up(session, business_unit_id, ticket_id, user, station)
    return await _respond(business_unit_id, station, result, user, session)


@router.post("/{station}/tickets/{ticket_id}/force-status", response_model=TransitionResult)
async def force_ticket_status(
    business_unit_id: uuid.UUID,
    station: Station,
    ticket_id: uuid.UUID,
    force_data: ForceStatusRequest,
    user: Optional[CurrentUser] = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Skip a ticket ahead to a later status (managers)"""
    check_business_unit(business_unit_id, user)
    result = station_tickets.force_status(
        session, business_unit_id, ticket_id, TicketStatus(force_data.status), user, station
    )
    return await _respond(business_unit_id, station, result, user, session)
