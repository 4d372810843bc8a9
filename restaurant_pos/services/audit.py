"""
Best-effort audit trail

Audit records are written in their own commit after the audited change has
been committed. A failure here is logged and never reported to the caller.
"""

from sqlmodel import Session
from typing import Any, Dict, Optional
import uuid
import structlog

from restaurant_pos.models.audit_log import AuditLog, AuditAction

logger = structlog.get_logger(__name__)


def record_audit(
    session: Session,
    business_unit_id: uuid.UUID,
    table_name: str,
    record_id: Any,
    action: AuditAction,
    old_values: Optional[Dict[str, Any]] = None,
    new_values: Optional[Dict[str, Any]] = None,
    user_id: Optional[uuid.UUID] = None,
) -> Optional[AuditLog]:
    """Write an audit record, returning None if it could not be stored"""
    try:
        entry = AuditLog(
            business_unit_id=business_unit_id,
            table_name=table_name,
            record_id=str(record_id),
            action=action,
            old_values=old_values,
            new_values=new_values,
            user_id=user_id,
        )
        session.add(entry)
        session.commit()
        return entry
    except Exception as e:
        session.rollback()
        logger.warning(f"Audit record for {table_name} {record_id} not written: {e}")
        return None
