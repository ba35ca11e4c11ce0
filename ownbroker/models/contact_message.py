"""Contact support messages. Survive account deletion (userId set to NULL)."""
from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, Index
from sqlalchemy.sql import func
from ownbroker.database import Base
from ownbroker.models.base import one_of
import enum


class ContactMessageStatus(str, enum.Enum):
    unseen = "unseen"
    seen = "seen"


class ContactMessage(Base):
    __tablename__ = "contactMessages"
    __table_args__ = (
        one_of("status", ContactMessageStatus, "ck_contactMessages_status"),
        Index("idx_contactMessages_status", "status"),
        Index("idx_contactMessages_userId", "userId"),
        {"sqlite_autoincrement": True},
    )

    id = Column("id", Integer, primary_key=True, autoincrement=True)
    # Null for guests who were not signed in, and after the sender's account is deleted
    user_id = Column("userId", String, ForeignKey("users.uid", ondelete="SET NULL"), nullable=True)

    name = Column("name", String, nullable=False)
    email = Column("email", String, nullable=False)
    subject = Column("subject", String, nullable=False)
    message = Column("message", Text, nullable=False)
    timestamp = Column("timestamp", DateTime, server_default=func.now())

    status = Column("status", String, nullable=False, default=ContactMessageStatus.unseen.value, server_default=ContactMessageStatus.unseen.value)

    reply_text = Column("reply_text", Text, nullable=True)
    reply_timestamp = Column("reply_timestamp", DateTime, nullable=True)
    has_admin_reply = Column("has_admin_reply", Integer, default=0, server_default="0")  # 0 | 1 (SQLite-friendly)
