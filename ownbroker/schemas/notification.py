"""Notification schemas."""
from datetime import datetime
from pydantic import BaseModel
from ownbroker.models.notification import NotificationStatus


class NotificationResponse(BaseModel):
    id: int
    user_id: str
    type: str
    title: str
    message: str
    related_id: str | None = None
    status: NotificationStatus
    created_at: datetime | None = None

    class Config:
        from_attributes = True
