"""In-app notifications (message center). Written after the triggering change commits."""
from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, Index
from sqlalchemy.sql import func
from ownbroker.database import Base
from ownbroker.models.base import one_of
import enum


class NotificationStatus(str, enum.Enum):
    unread = "unread"
    read = "read"


class NotificationKind(str, enum.Enum):
    role_request_status = "role_request_status"
    role_change = "role_change"
    account_status = "account_status"
    booking_status = "booking_status"
    property_status = "property_status"
    contact_reply = "contact_reply"


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        one_of("status", NotificationStatus, "ck_notifications_status"),
        Index("idx_notifications_userId", "userId"),
        Index("idx_notifications_status", "status"),
        {"sqlite_autoincrement": True},
    )

    id = Column("id", Integer, primary_key=True, autoincrement=True)
    user_id = Column("userId", String, ForeignKey("users.uid", ondelete="CASCADE"), nullable=False)
    # Free-form tag; NotificationKind lists the ones this code emits
    type = Column("type", String, nullable=False)
    title = Column("title", String, nullable=False)
    message = Column("message", Text, nullable=False)
    related_id = Column("relatedId", String, nullable=True)  # booking id, request id, message id
    status = Column("status", String, nullable=False, default=NotificationStatus.unread.value, server_default=NotificationStatus.unread.value)

    created_at = Column("createdAt", DateTime, server_default=func.now())
