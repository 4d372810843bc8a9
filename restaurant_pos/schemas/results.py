"""
Result objects returned by station and order operations

Operations report failures through these objects instead of raising, so
callers can branch on ``success`` and show ``error`` as a notice.
"""

from pydantic import BaseModel
from typing import List, Optional
from enum import Enum
import uuid

from restaurant_pos.models.station_ticket import TicketStatus
from restaurant_pos.schemas.orders import OrderRead
from restaurant_pos.schemas.stations import TicketView


class StationErrorCode(str, Enum):
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    INVALID_TRANSITION = "invalid_transition"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    STORE_FAILURE = "store_failure"


class ActionResult(BaseModel):
    """Success flag plus a user-facing message on failure"""
    success: bool
    error: Optional[str] = None
    error_code: Optional[StationErrorCode] = None

    @classmethod
    def ok(cls, **values):
        return cls(success=True, **values)

    @classmethod
    def fail(cls, error_code: StationErrorCode, error: str, **values):
        return cls(success=False, error=error, error_code=error_code, **values)


class TransitionResult(ActionResult):
    """Outcome of a station ticket status change"""
    ticket_id: Optional[uuid.UUID] = None
    previous_status: Optional[TicketStatus] = None
    status: Optional[TicketStatus] = None
    changed: bool = False
    items_updated: int = 0
    order_ready: bool = False


class OrderResult(ActionResult):
    """Outcome of placing an order or adding items to it"""
    order: Optional[OrderRead] = None
    tickets: List[TicketView] = []
