"""
Ticket number resolution

Station tickets carry their parent's order number, or the parent's number
with the additional-items suffix for a batch appended after placement.
Every feed query and membership check is scoped through these helpers.
"""

from sqlmodel import Session, select
from typing import Iterable, List
import uuid

from restaurant_pos.core.config import get_settings
from restaurant_pos.models.order import Order

settings = get_settings()


def additional_order_number(order_number: str) -> str:
    """Ticket number of an additional-items batch for ``order_number``"""
    return f"{order_number}{settings.ADDITIONAL_ITEMS_SUFFIX}"


def is_additional_order_number(ticket_number: str) -> bool:
    return ticket_number.endswith(settings.ADDITIONAL_ITEMS_SUFFIX)


def base_order_number(ticket_number: str) -> str:
    """Parent order number of a ticket number (strips one trailing suffix)"""
    if is_additional_order_number(ticket_number):
        return ticket_number[: -len(settings.ADDITIONAL_ITEMS_SUFFIX)]
    return ticket_number


def resolve_ticket_numbers(order_numbers: Iterable[str]) -> List[str]:
    """Expand order numbers to every ticket number they may own

    Returns each number followed by its additional-items variant, in input
    order, without duplicates.
    """
    resolved: List[str] = []
    seen = set()
    for number in order_numbers:
        for candidate in (number, additional_order_number(number)):
            if candidate not in seen:
                seen.add(candidate)
                resolved.append(candidate)
    return resolved


def business_unit_ticket_numbers(session: Session, business_unit_id: uuid.UUID) -> List[str]:
    """Resolved ticket numbers for every order of a business unit"""
    order_numbers = session.exec(
        select(Order.order_number).where(Order.business_unit_id == business_unit_id)
    ).all()
    return resolve_ticket_numbers(order_numbers)
