"""Owner role upgrade requests: one row per user, ever."""
from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, Index
from sqlalchemy.sql import func
from ownbroker.database import Base
from ownbroker.models.base import one_of
import enum


class RoleRequestStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class RoleRequest(Base):
    __tablename__ = "roleRequests"
    __table_args__ = (
        one_of("status", RoleRequestStatus, "ck_roleRequests_status"),
        Index("idx_roleRequests_userId", "userId"),
        Index("idx_roleRequests_status", "status"),
        {"sqlite_autoincrement": True},
    )

    id = Column("id", Integer, primary_key=True, autoincrement=True)
    # UNIQUE: a new request after rejection reuses this row
    user_id = Column("userId", String, ForeignKey("users.uid", ondelete="CASCADE"), unique=True, nullable=False)
    user_name = Column("userName", String, nullable=False)
    user_email = Column("userEmail", String, nullable=False)
    requested_role = Column("requestedRole", String, nullable=False, default="owner", server_default="owner")

    status = Column("status", String, nullable=False, default=RoleRequestStatus.pending.value, server_default=RoleRequestStatus.pending.value)
    request_timestamp = Column("requestTimestamp", DateTime, server_default=func.now())
    action_timestamp = Column("actionTimestamp", DateTime, nullable=True)
    admin_notes = Column("adminNotes", Text, nullable=True)
