"""
Domain events system

Domain events represent important business events that can be published
and subscribed to by multiple parts of the system. Station printers and
waiter notifications subscribe here; a failing handler never affects the
operation that published the event.
"""

from typing import Any, Callable, Dict, List, Optional
import uuid
import structlog

from restaurant_pos.core.clock import utc_now

logger = structlog.get_logger(__name__)


class DomainEvent:
    """Base class for domain events"""

    def __init__(self, event_id: uuid.UUID = None):
        self.event_id = event_id or uuid.uuid4()
        self.occurred_at = utc_now()

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary"""
        return {
            "event_id": str(self.event_id),
            "occurred_at": self.occurred_at.isoformat(),
            "event_type": self.__class__.__name__
        }


class TicketsCreated(DomainEvent):
    """Event fired when an order (or an additional batch) fans out to stations"""

    def __init__(
        self,
        order_id: uuid.UUID,
        business_unit_id: uuid.UUID,
        order_number: str,
        ticket_ids: List[uuid.UUID],
        stations: List[str],
        is_additional: bool = False,
        event_id: uuid.UUID = None
    ):
        super().__init__(event_id)
        self.order_id = order_id
        self.business_unit_id = business_unit_id
        self.order_number = order_number
        self.ticket_ids = ticket_ids
        self.stations = stations
        self.is_additional = is_additional

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "order_id": str(self.order_id),
            "business_unit_id": str(self.business_unit_id),
            "order_number": self.order_number,
            "ticket_ids": [str(ticket_id) for ticket_id in self.ticket_ids],
            "stations": self.stations,
            "is_additional": self.is_additional
        })
        return data


class TicketStatusChanged(DomainEvent):
    """Event fired when a station ticket moves to a new status"""

    def __init__(
        self,
        ticket_id: uuid.UUID,
        business_unit_id: uuid.UUID,
        station: str,
        old_status: str,
        new_status: str,
        changed_by: Optional[uuid.UUID] = None,
        event_id: uuid.UUID = None
    ):
        super().__init__(event_id)
        self.ticket_id = ticket_id
        self.business_unit_id = business_unit_id
        self.station = station
        self.old_status = old_status
        self.new_status = new_status
        self.changed_by = changed_by

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "ticket_id": str(self.ticket_id),
            "business_unit_id": str(self.business_unit_id),
            "station": self.station,
            "old_status": self.old_status,
            "new_status": self.new_status,
            "changed_by": str(self.changed_by) if self.changed_by else None
        })
        return data


class OrderReady(DomainEvent):
    """Event fired when every item of an order is ready for pickup"""

    def __init__(
        self,
        order_id: uuid.UUID,
        business_unit_id: uuid.UUID,
        event_id: uuid.UUID = None
    ):
        super().__init__(event_id)
        self.order_id = order_id
        self.business_unit_id = business_unit_id

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "order_id": str(self.order_id),
            "business_unit_id": str(self.business_unit_id)
        })
        return data


class EventBus:
    """Simple in-memory event bus for publishing domain events"""

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}

    def subscribe(self, event_type: str, handler: Callable):
        """Subscribe to a specific event type"""
        if event_type not in self._subscribers:
            self._subscribers[event_type] = []
        self._subscribers[event_type].append(handler)
        logger.debug(f"Subscribed handler to event type: {event_type}")

    def unsubscribe(self, event_type: str, handler: Callable):
        """Unsubscribe from an event type"""
        if event_type in self._subscribers:
            self._subscribers[event_type].remove(handler)
            logger.debug(f"Unsubscribed handler from event type: {event_type}")

    async def publish(self, event: DomainEvent):
        """Publish an event to all subscribers"""
        event_type = event.__class__.__name__
        handlers = self._subscribers.get(event_type, [])

        if not handlers:
            logger.debug(f"No subscribers for event type: {event_type}")
            return

        logger.info(f"Publishing event {event_type}: {event.event_id}")

        for handler in handlers:
            try:
                await handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event_type}: {e}", exc_info=True)

    def clear_subscribers(self):
        """Clear all subscribers (useful for testing)"""
        self._subscribers.clear()
        logger.debug("Cleared all event subscribers")


# Global event bus instance
event_bus = EventBus()
