"""
Shared helpers for station tests
"""

from sqlmodel import Session

from restaurant_pos.models.station_ticket import Station, StationTicket
from restaurant_pos.schemas.results import OrderResult


def ticket_id_for(result: OrderResult, station: Station):
    """Id of the ticket an order result sent to ``station``"""
    for ticket in result.tickets:
        if ticket.station == station:
            return ticket.id
    raise AssertionError(f"No {station.value} ticket in result")


def load_ticket(db: Session, ticket_id) -> StationTicket:
    """Fresh copy of a ticket from the database"""
    db.expire_all()
    return db.get(StationTicket, ticket_id)
