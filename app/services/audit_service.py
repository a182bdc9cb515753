"""
Audit trail for lease signatures, finalization and payment settlement.
"""
import json
import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app.models.audit import AuditAction, LeaseAuditLog

logger = logging.getLogger(__name__)


def record_audit(
    db: Session,
    action: AuditAction,
    lease_id=None,
    user_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> LeaseAuditLog:
    """Add an audit entry to the current transaction; it commits with the operation it records."""
    entry = LeaseAuditLog(
        action=action,
        lease_id=lease_id,
        user_id=str(user_id) if user_id is not None else None,
        details=json.dumps(details or {}, default=str),
    )
    db.add(entry)
    logger.debug(f"[AUDIT] {action.value} lease={lease_id} user={user_id}")
    return entry
