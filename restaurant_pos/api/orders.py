"""
Orders API endpoints - placement and additional-items batches
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session
from typing import Optional
import structlog
import uuid

from restaurant_pos.api import result_response
from restaurant_pos.core.database import get_session
from restaurant_pos.core.dependencies import check_business_unit, get_current_user
from restaurant_pos.core.events import TicketsCreated, event_bus
from restaurant_pos.core.permissions import CurrentUser, Permission
from restaurant_pos.schemas.orders import AdditionalItemsCreate, OrderCreate, OrderRead
from restaurant_pos.schemas.results import OrderResult
from restaurant_pos.services import orders as order_service

logger = structlog.get_logger(__name__)
router = APIRouter()


async def _publish_tickets(business_unit_id: uuid.UUID, result: OrderResult, additional: bool) -> None:
    """Send new tickets to the station printers"""
    if not result.success or not result.tickets:
        return

    await event_bus.publish(TicketsCreated(
        order_id=result.order.id,
        business_unit_id=business_unit_id,
        order_number=result.order.order_number,
        ticket_ids=[ticket.id for ticket in result.tickets],
        stations=[ticket.station.value for ticket in result.tickets],
        is_additional=additional,
    ))


@router.post("", response_model=OrderResult, status_code=status.HTTP_201_CREATED)
async def place_order(
    business_unit_id: uuid.UUID,
    order_data: OrderCreate,
    user: Optional[CurrentUser] = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Place an order and fan it out to the kitchen and bar"""
    check_business_unit(business_unit_id, user)
    result = order_service.place_order(session, business_unit_id, order_data, user)
    await _publish_tickets(business_unit_id, result, additional=False)
    return result_response(result, success_status=status.HTTP_201_CREATED)


@router.post("/{order_id}/items", response_model=OrderResult)
async def add_order_items(
    business_unit_id: uuid.UUID,
    order_id: uuid.UUID,
    items_data: AdditionalItemsCreate,
    user: Optional[CurrentUser] = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Append items to an order already sent to the stations"""
    check_business_unit(business_unit_id, user)
    result = order_service.add_items_to_order(session, business_unit_id, order_id, items_data, user)
    await _publish_tickets(business_unit_id, result, additional=True)
    return result_response(result)


@router.get("/{order_id}", response_model=OrderRead)
async def get_order(
    business_unit_id: uuid.UUID,
    order_id: uuid.UUID,
    user: Optional[CurrentUser] = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Get order with its items"""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    check_business_unit(business_unit_id, user)
    if not user.can(Permission.ORDER_VIEW):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Permission required: {Permission.ORDER_VIEW.value}",
        )

    order = order_service.get_order(session, business_unit_id, order_id)
    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found"
        )
    return OrderRead.from_order(order)
