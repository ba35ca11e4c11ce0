"""User schemas."""
from datetime import datetime
from pydantic import BaseModel, field_validator
from ownbroker.models.user import UserRole, UserStatus


class UserCreate(BaseModel):
    name: str
    email: str
    password: str
    mobile: str | None = None

    @field_validator("name", "email")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("invalid email address")
        return v.lower()

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        if len(v or "") < 6:
            raise ValueError("password must be at least 6 characters")
        return v


class UserResponse(BaseModel):
    uid: str
    name: str
    email: str
    role: UserRole
    status: UserStatus
    mobile: str | None = None
    avatar_url: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class RoleChange(BaseModel):
    role: UserRole


class DashboardStats(BaseModel):
    total_users: int
    total_properties: int
    pending_properties: int
    pending_role_requests: int
    total_bookings: int
    unseen_messages: int


class ProfileUpdate(BaseModel):
    name: str
    mobile: str


class OwnerDashboardStats(BaseModel):
    total_properties: int
    pending_properties: int
    verified_properties: int
    total_bookings: int
    pending_bookings: int
    approved_bookings: int


class UserBookingsSummary(BaseModel):
    total: int
    upcoming: int
    pending: int
