from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from timegrid.core.logging_config import request_id_var
from timegrid.models.activity_log import ActivityLog
from timegrid.models.user import User

logger = logging.getLogger(__name__)


def log_activity(
    db: Session,
    *,
    user: User | None,
    action: str,
    entity_type: str,
    entity_id: str,
    details: dict | None = None,
) -> ActivityLog:
    """Queue an audit row on ``db``; it is written by the caller's commit."""
    request_id = request_id_var.get()
    entry = ActivityLog(
        user_id=getattr(user, "id", None),
        request_id=None if request_id == "-" else request_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=dict(details or {}),
    )
    db.add(entry)
    logger.debug("%s %s/%s by %s", action, entity_type, entity_id, entry.user_id or "system")
    return entry
