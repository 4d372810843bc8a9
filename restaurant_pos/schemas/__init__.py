"""
Schemas module
"""

from restaurant_pos.schemas.token import LoginRequest, TokenPayload, TokenResponse
from restaurant_pos.schemas.orders import (
    AdditionalItemsCreate, OrderCreate, OrderItemCreate, OrderItemRead, OrderRead
)
from restaurant_pos.schemas.stations import ForceStatusRequest, TicketItemSnapshot, TicketView
from restaurant_pos.schemas.results import (
    ActionResult, OrderResult, StationErrorCode, TransitionResult
)

__all__ = [
    "LoginRequest",
    "TokenPayload",
    "TokenResponse",
    "AdditionalItemsCreate",
    "OrderCreate",
    "OrderItemCreate",
    "OrderItemRead",
    "OrderRead",
    "ForceStatusRequest",
    "TicketItemSnapshot",
    "TicketView",
    "ActionResult",
    "OrderResult",
    "StationErrorCode",
    "TransitionResult",
]
