"""
Background job to purge served station tickets

This script should be run periodically (e.g., via cron) to remove tickets
that were served longer ago than the retention window. Tickets that are
still open are never touched.
"""

import sys
from datetime import datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy import delete, func
from sqlmodel import Session
import structlog

from restaurant_pos.core.clock import utc_now
from restaurant_pos.core.config import get_settings
from restaurant_pos.core.database import engine
from restaurant_pos.models.station_ticket import Station, StationTicket, TicketStatus

logger = structlog.get_logger(__name__)
settings = get_settings()


def purge_served_tickets(
    session: Session,
    now: Optional[datetime] = None,
    stations: Optional[Iterable[str]] = None
) -> dict:
    """Delete SERVED tickets whose served time is past the retention window"""
    now = now or utc_now()
    cutoff = now - timedelta(hours=settings.TICKET_RETENTION_HOURS)
    if stations is None:
        stations = settings.TICKET_PURGE_STATIONS
    stations = [Station(station) for station in stations]

    if not stations:
        logger.info("No stations configured for ticket purge")
        return {"deleted": 0, "cutoff": cutoff.isoformat(), "stations": []}

    served_at = func.coalesce(
        StationTicket.picked_up_at,
        StationTicket.completed_at,
        StationTicket.created_at
    )

    try:
        result = session.execute(
            delete(StationTicket).where(
                StationTicket.station.in_(stations),
                StationTicket.status == TicketStatus.SERVED,
                served_at < cutoff
            )
        )
        session.commit()

    except Exception as e:
        session.rollback()
        logger.error(f"Error purging served tickets: {e}")
        raise

    deleted = result.rowcount
    logger.info(f"Purged {deleted} served tickets older than {cutoff.isoformat()}")
    return {
        "deleted": deleted,
        "cutoff": cutoff.isoformat(),
        "stations": [station.value for station in stations],
    }


def main():
    """Main entry point for purge job"""
    logger.info("=" * 80)
    logger.info("Starting Served Ticket Purge Job")
    logger.info("=" * 80)

    try:
        with Session(engine) as session:
            results = purge_served_tickets(session)

            logger.info("=" * 80)
            logger.info("Served Ticket Purge Complete")
            logger.info(f"Results: {results}")
            logger.info("=" * 80)

    except Exception as e:
        logger.error(f"Fatal error in purge job: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
