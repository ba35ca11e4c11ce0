"""Bookings: pending -> approved | cancelled, approved -> cancelled. Cancelled is terminal."""
import logging
from datetime import date

from sqlalchemy import and_, case, func

from ownbroker.database import Database
from ownbroker.errors import AlreadyCancelled, InvalidRequest, NotFound, PolicyViolation, StateConflict
from ownbroker.models.booking import Booking, BookingStatus
from ownbroker.models.notification import NotificationKind
from ownbroker.models.property import Property, PropertyStatus
from ownbroker.models.user import User, UserStatus
from ownbroker.schemas.user import UserBookingsSummary
from ownbroker.services.notifications import NotificationDispatcher
from ownbroker.services.transitions import new_id, raise_not_applied

logger = logging.getLogger(__name__)

_OPEN = (BookingStatus.pending.value, BookingStatus.approved.value)


class BookingWorkflow:
    def __init__(self, db: Database, notifier: NotificationDispatcher):
        self.db = db
        self.notifier = notifier

    def request(self, user_id: str, property_id: str, start_date: date, end_date: date) -> Booking:
        if end_date <= start_date:
            raise InvalidRequest("End date must be after start date.")
        with self.db.session() as session:
            user = session.get(User, user_id)
            if user is None:
                raise NotFound("User not found.")
            if user.status != UserStatus.active.value:
                raise PolicyViolation("Account is not active.")
            prop = session.get(Property, property_id)
            if prop is None:
                raise NotFound("Property not found.")
            if prop.status != PropertyStatus.verified.value:
                raise StateConflict("Property is not available for booking.", current_status=prop.status)
            if prop.owner_id == user_id:
                raise PolicyViolation("Owners cannot book their own property.")
            booking = Booking(
                id=new_id(),
                user_id=user_id,
                property_id=property_id,
                start_date=start_date,
                end_date=end_date,
                status=BookingStatus.pending.value,
            )
            session.add(booking)
            session.flush()
            session.refresh(booking)
            owner_id, title = prop.owner_id, prop.title
        logger.info("[Booking] %s requested by %s for %s", booking.id, user_id, property_id)
        self.notifier.notify(
            owner_id,
            NotificationKind.booking_status,
            "New Booking Request",
            f"{user.name} requested '{title}' from {start_date.isoformat()} to {end_date.isoformat()}.",
            related_id=booking.id,
        )
        return booking

    def approve(self, booking_id: str, owner_id: str) -> Booking:
        booking, title = self._owner_decision(booking_id, owner_id, BookingStatus.approved)
        self.notifier.notify(
            booking.user_id,
            NotificationKind.booking_status,
            "Booking Approved",
            f"Your booking for '{title}' has been approved.",
            related_id=booking.id,
        )
        return booking

    def reject(self, booking_id: str, owner_id: str) -> Booking:
        booking, title = self._owner_decision(booking_id, owner_id, BookingStatus.cancelled)
        self.notifier.notify(
            booking.user_id,
            NotificationKind.booking_status,
            "Booking Rejected",
            f"Your booking for '{title}' was declined by the owner.",
            related_id=booking.id,
        )
        return booking

    def _owner_decision(self, booking_id: str, owner_id: str, target: BookingStatus) -> tuple[Booking, str]:
        with self.db.session() as session:
            row = (
                session.query(Booking, Property)
                .join(Property, Booking.property_id == Property.id)
                .filter(Booking.id == booking_id)
                .first()
            )
            if row is None or row[1].owner_id != owner_id:
                raise NotFound("Booking not found.")
            title = row[1].title
            rows = (
                session.query(Booking)
                .filter(Booking.id == booking_id, Booking.status == BookingStatus.pending.value)
                .update({Booking.status: target.value}, synchronize_session=False)
            )
            if rows == 0:
                raise_not_applied(session, Booking, booking_id, "Booking", "pending")
            booking = session.get(Booking, booking_id, populate_existing=True)
        logger.info("[Booking] %s -> %s by owner %s", booking_id, target.value, owner_id)
        return booking, title

    def cancel(self, booking_id: str, user_id: str) -> Booking:
        """Booker cancels a pending or approved booking."""
        with self.db.session() as session:
            existing = session.get(Booking, booking_id)
            if existing is None or existing.user_id != user_id:
                raise NotFound("Booking not found.")
            rows = (
                session.query(Booking)
                .filter(
                    Booking.id == booking_id,
                    Booking.user_id == user_id,
                    Booking.status.in_(_OPEN),
                )
                .update({Booking.status: BookingStatus.cancelled.value}, synchronize_session=False)
            )
            if rows == 0:
                raise_not_applied(session, Booking, booking_id, "Booking", "pending or approved")
            booking = session.get(Booking, booking_id, populate_existing=True)
            prop = session.get(Property, booking.property_id)
            owner_id, title = prop.owner_id, prop.title
        logger.info("[Booking] %s cancelled by booker", booking_id)
        self.notifier.notify(
            owner_id,
            NotificationKind.booking_status,
            "Booking Cancelled",
            f"A booking for '{title}' was cancelled by the guest.",
            related_id=booking_id,
        )
        return booking

    def admin_cancel(self, booking_id: str) -> Booking:
        """Raises AlreadyCancelled (nothing written, nobody notified) for a cancelled booking."""
        with self.db.session() as session:
            existing = session.get(Booking, booking_id)
            if existing is None:
                raise NotFound("Booking not found.")
            if existing.status == BookingStatus.cancelled.value:
                raise AlreadyCancelled(booking_id)
            rows = (
                session.query(Booking)
                .filter(Booking.id == booking_id, Booking.status != BookingStatus.cancelled.value)
                .update({Booking.status: BookingStatus.cancelled.value}, synchronize_session=False)
            )
            if rows == 0:
                raise AlreadyCancelled(booking_id)
            booking = session.get(Booking, booking_id, populate_existing=True)
        logger.info("[Booking] %s cancelled by admin", booking_id)
        self.notifier.notify(
            booking.user_id,
            NotificationKind.booking_status,
            "Booking Cancelled",
            "Your booking has been cancelled by an administrator.",
            related_id=booking_id,
        )
        return booking

    def delete(self, booking_id: str) -> None:
        with self.db.session() as session:
            if session.query(Booking).filter(Booking.id == booking_id).delete(synchronize_session=False) == 0:
                raise NotFound("Booking not found.")
        logger.info("[Booking] %s deleted", booking_id)

    def get(self, booking_id: str) -> Booking:
        with self.db.session() as session:
            booking = session.get(Booking, booking_id)
        if booking is None:
            raise NotFound("Booking not found.")
        return booking

    def list_bookings(
        self,
        user_id: str | None = None,
        property_id: str | None = None,
        owner_id: str | None = None,
        status: BookingStatus | str | None = None,
    ) -> list[Booking]:
        with self.db.session() as session:
            q = session.query(Booking)
            if owner_id is not None:
                q = q.join(Property, Booking.property_id == Property.id).filter(Property.owner_id == owner_id)
            if user_id is not None:
                q = q.filter(Booking.user_id == user_id)
            if property_id is not None:
                q = q.filter(Booking.property_id == property_id)
            if status is not None:
                q = q.filter(Booking.status == BookingStatus(status).value)
            return q.order_by(Booking.booking_date.desc(), Booking.id).all()

    def user_bookings_summary(self, user_id: str, today: date | None = None) -> UserBookingsSummary:
        """Total bookings, approved ones starting today or later, and pending ones."""
        today = today or date.today()
        with self.db.session() as session:
            total, upcoming, pending = (
                session.query(
                    func.count(Booking.id),
                    func.sum(
                        case(
                            (
                                and_(
                                    Booking.status == BookingStatus.approved.value,
                                    Booking.start_date >= today,
                                ),
                                1,
                            ),
                            else_=0,
                        )
                    ),
                    func.sum(case((Booking.status == BookingStatus.pending.value, 1), else_=0)),
                )
                .filter(Booking.user_id == user_id)
                .one()
            )
        return UserBookingsSummary(total=total or 0, upcoming=upcoming or 0, pending=pending or 0)
