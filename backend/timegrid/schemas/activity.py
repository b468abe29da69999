from datetime import datetime

from pydantic import BaseModel


class ActivityLogOut(BaseModel):
    id: str
    user_id: str | None = None
    request_id: str | None = None
    action: str
    entity_type: str
    entity_id: str
    details: dict
    created_at: datetime

    model_config = {"from_attributes": True}
