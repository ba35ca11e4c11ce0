"""Users: the one canonical identity (uid) every other table points at."""
from sqlalchemy import Column, String, DateTime, Index
from sqlalchemy.sql import func
from ownbroker.database import Base
from ownbroker.models.base import one_of
import enum


class UserRole(str, enum.Enum):
    user = "user"
    owner = "owner"
    admin = "admin"


class UserStatus(str, enum.Enum):
    active = "active"
    pending = "pending"
    suspended = "suspended"


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        one_of("role", UserRole, "ck_users_role"),
        one_of("status", UserStatus, "ck_users_status"),
        Index("idx_users_email", "email"),
    )

    # uid is the only identity column; no separate userId/id column may exist
    uid = Column("uid", String, primary_key=True)
    name = Column("name", String, nullable=False)
    email = Column("email", String, unique=True, nullable=False)
    password_hash = Column("passwordHash", String, nullable=False)
    role = Column("role", String, nullable=False, default=UserRole.user.value, server_default=UserRole.user.value)
    status = Column("status", String, nullable=False, default=UserStatus.active.value, server_default=UserStatus.active.value)
    mobile = Column("mobile", String, nullable=True)
    avatar_url = Column("avatarUrl", String, nullable=True)

    created_at = Column("createdAt", DateTime, server_default=func.now())
