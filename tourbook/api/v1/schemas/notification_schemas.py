from typing import Any, Dict
from datetime import datetime
from pydantic import BaseModel


class NotificationOut(BaseModel):
    id: str
    type: str
    payload: Dict[str, Any]
    seen: bool
    created_at: datetime

    model_config = {
        "from_attributes": True,
    }


class UnreadCountOut(BaseModel):
    unread: int


class MarkAllSeenOut(BaseModel):
    updated: int
