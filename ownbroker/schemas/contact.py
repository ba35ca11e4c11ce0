"""Contact support schemas."""
from datetime import datetime
from pydantic import BaseModel, field_validator
from ownbroker.models.contact_message import ContactMessageStatus


class ContactMessageCreate(BaseModel):
    name: str
    email: str
    subject: str
    message: str

    @field_validator("name", "email", "subject", "message")
    @classmethod
    def required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("must not be empty")
        return v


class ContactReply(BaseModel):
    reply_text: str


class ContactMessageResponse(BaseModel):
    id: int
    user_id: str | None = None
    name: str
    email: str
    subject: str
    message: str
    timestamp: datetime | None = None
    status: ContactMessageStatus
    reply_text: str | None = None
    reply_timestamp: datetime | None = None
    has_admin_reply: bool = False

    class Config:
        from_attributes = True
