from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from timegrid.api.deps import get_db, require_editor
from timegrid.models.activity_log import ActivityLog
from timegrid.models.user import User
from timegrid.schemas.activity import ActivityLogOut

router = APIRouter()


@router.get("/activity/logs", response_model=list[ActivityLogOut])
def list_activity_logs(
    entity_type: str | None = None,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> list[ActivityLogOut]:
    query = select(ActivityLog).order_by(ActivityLog.created_at.desc()).limit(500)
    if entity_type:
        query = query.where(ActivityLog.entity_type == entity_type)
    return list(db.execute(query).scalars())
