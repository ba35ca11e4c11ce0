"""Role request schemas."""
from datetime import datetime
from pydantic import BaseModel
from ownbroker.models.role_request import RoleRequestStatus


class RoleRequestCreate(BaseModel):
    message: str | None = None  # shown in logs only; not stored


class RoleRequestDecision(BaseModel):
    user_id: str
    admin_notes: str | None = None


class RoleRequestResponse(BaseModel):
    id: int
    user_id: str
    user_name: str
    user_email: str
    requested_role: str
    status: RoleRequestStatus
    request_timestamp: datetime | None = None
    action_timestamp: datetime | None = None
    admin_notes: str | None = None

    class Config:
        from_attributes = True
