"""Bookings. Cancellation is terminal."""
from sqlalchemy import Column, String, Date, ForeignKey, DateTime, Index
from sqlalchemy.orm import backref, relationship
from sqlalchemy.sql import func
from ownbroker.database import Base
from ownbroker.models.base import one_of
import enum


class BookingStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    cancelled = "cancelled"


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        one_of("status", BookingStatus, "ck_bookings_status"),
        Index("idx_bookings_userId", "userId"),
        Index("idx_bookings_propertyId", "propertyId"),
        Index("idx_bookings_status", "status"),
    )

    id = Column("id", String, primary_key=True)
    user_id = Column("userId", String, ForeignKey("users.uid", ondelete="CASCADE"), nullable=False)
    property_id = Column("propertyId", String, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)

    start_date = Column("startDate", Date, nullable=False)
    end_date = Column("endDate", Date, nullable=False)
    status = Column("status", String, nullable=False, default=BookingStatus.pending.value, server_default=BookingStatus.pending.value)

    booking_date = Column("bookingDate", DateTime, server_default=func.now())

    user = relationship("User", backref=backref("bookings", passive_deletes=True))
    property_ref = relationship("Property", backref=backref("bookings", passive_deletes=True))
