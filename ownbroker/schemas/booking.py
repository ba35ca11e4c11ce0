"""Booking schemas."""
from datetime import date, datetime
from pydantic import BaseModel
from ownbroker.models.booking import BookingStatus


class BookingCreate(BaseModel):
    property_id: str
    start_date: date
    end_date: date


class BookingResponse(BaseModel):
    id: str
    user_id: str
    property_id: str
    start_date: date
    end_date: date
    status: BookingStatus
    booking_date: datetime | None = None

    class Config:
        from_attributes = True
