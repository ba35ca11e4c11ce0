"""Property listings: created pending; admins verify or reject; owner edits reopen rejected listings."""
import logging
from typing import Any, Mapping

from sqlalchemy import case, func

from ownbroker.database import Database
from ownbroker.errors import InvalidRequest, NotFound, PolicyViolation
from ownbroker.models.booking import Booking, BookingStatus
from ownbroker.models.notification import NotificationKind
from ownbroker.models.property import Facing, Property, PropertyStatus
from ownbroker.models.user import User, UserRole, UserStatus
from ownbroker.schemas.user import OwnerDashboardStats
from ownbroker.services.notifications import NotificationDispatcher
from ownbroker.services.transitions import new_id, raise_not_applied

logger = logging.getLogger(__name__)

# Fields an owner may set; status and ownerId are never taken from input
EDITABLE_FIELDS = frozenset(
    {
        "title", "description", "price", "city", "property_type", "image_url", "pano_image_url",
        "amenities", "latitude", "longitude", "bedrooms", "bathrooms", "balconies",
        "kitchen_available", "hall_available", "size", "floor_number", "total_floors",
        "facing", "gallery_images", "tags",
    }
)


def _clean(data: Mapping[str, Any]) -> dict[str, Any]:
    values = {k: v for k, v in (data or {}).items() if k in EDITABLE_FIELDS}
    if "title" in values:
        values["title"] = (values["title"] or "").strip()
        if not values["title"]:
            raise InvalidRequest("Title is required.")
    if "price" in values:
        try:
            values["price"] = float(values["price"])
        except (TypeError, ValueError):
            raise InvalidRequest("Price must be a number.") from None
        if values["price"] <= 0:
            raise InvalidRequest("Price must be positive.")
    if values.get("facing") is not None:
        try:
            values["facing"] = Facing(values["facing"]).value
        except ValueError:
            raise InvalidRequest(f"Invalid facing '{values['facing']}'.") from None
    return values


class PropertyWorkflow:
    def __init__(self, db: Database, notifier: NotificationDispatcher):
        self.db = db
        self.notifier = notifier

    def create(self, owner_id: str, data: Mapping[str, Any]) -> Property:
        values = _clean(data)
        if "title" not in values or "price" not in values:
            raise InvalidRequest("Title and price are required.")
        with self.db.session() as session:
            owner = session.get(User, owner_id)
            if owner is None:
                raise NotFound("Owner not found.")
            if owner.role not in (UserRole.owner.value, UserRole.admin.value):
                raise PolicyViolation("Only owners can list properties.")
            if owner.status != UserStatus.active.value:
                raise PolicyViolation("Account is not active.")
            prop = Property(id=new_id(), owner_id=owner_id, status=PropertyStatus.pending.value, **values)
            session.add(prop)
            session.flush()
            session.refresh(prop)
        logger.info("[Property] %s created by %s (pending review)", prop.id, owner_id)
        return prop

    def update(self, property_id: str, owner_id: str, changes: Mapping[str, Any]) -> Property:
        """Owner edit. A rejected listing goes back to pending; others keep their status."""
        values = _clean(changes)
        with self.db.session() as session:
            prop = session.get(Property, property_id)
            if prop is None or prop.owner_id != owner_id:
                raise NotFound("Property not found.")
            current = prop.status
            if current == PropertyStatus.rejected.value:
                values["status"] = PropertyStatus.pending.value
            if values:
                # Guard on the status we read so a concurrent moderation decision is not overwritten
                rows = (
                    session.query(Property)
                    .filter(
                        Property.id == property_id,
                        Property.owner_id == owner_id,
                        Property.status == current,
                    )
                    .update({getattr(Property, k): v for k, v in values.items()}, synchronize_session=False)
                )
                if rows == 0:
                    raise_not_applied(session, Property, property_id, "Property", current)
            prop = session.get(Property, property_id, populate_existing=True)
        logger.info("[Property] %s updated by owner (status %s -> %s)", property_id, current, prop.status)
        return prop

    def approve(self, property_id: str) -> Property:
        prop = self._moderate(property_id, PropertyStatus.verified)
        self.notifier.notify(
            prop.owner_id,
            NotificationKind.property_status,
            "Property Approved",
            f"Your property '{prop.title}' has been verified and is now visible to renters.",
            related_id=prop.id,
        )
        return prop

    def reject(self, property_id: str, reason: str) -> Property:
        reason = (reason or "").strip()
        if not reason:
            raise InvalidRequest("A reason is required to reject a property.")
        prop = self._moderate(property_id, PropertyStatus.rejected)
        self.notifier.notify(
            prop.owner_id,
            NotificationKind.property_status,
            "Property Rejected",
            f"Your property '{prop.title}' was rejected. Reason: {reason}",
            related_id=prop.id,
        )
        return prop

    def _moderate(self, property_id: str, target: PropertyStatus) -> Property:
        with self.db.session() as session:
            rows = (
                session.query(Property)
                .filter(Property.id == property_id, Property.status == PropertyStatus.pending.value)
                .update({Property.status: target.value}, synchronize_session=False)
            )
            if rows == 0:
                raise_not_applied(session, Property, property_id, "Property", "pending")
            prop = session.get(Property, property_id, populate_existing=True)
        logger.info("[Property] %s -> %s", property_id, target.value)
        return prop

    def delete(self, property_id: str, owner_id: str | None = None) -> None:
        """Owner-scoped when owner_id is given. Bookings go with the property (FK cascade)."""
        with self.db.session() as session:
            q = session.query(Property).filter(Property.id == property_id)
            if owner_id is not None:
                q = q.filter(Property.owner_id == owner_id)
            if q.delete(synchronize_session=False) == 0:
                raise NotFound("Property not found.")
        logger.info("[Property] %s deleted%s", property_id, " by owner" if owner_id else " by admin")

    def get(self, property_id: str) -> Property:
        with self.db.session() as session:
            prop = session.get(Property, property_id)
        if prop is None:
            raise NotFound("Property not found.")
        return prop

    def list_properties(
        self,
        status: PropertyStatus | str | None = None,
        owner_id: str | None = None,
    ) -> list[Property]:
        with self.db.session() as session:
            q = session.query(Property)
            if status is not None:
                q = q.filter(Property.status == PropertyStatus(status).value)
            if owner_id is not None:
                q = q.filter(Property.owner_id == owner_id)
            return q.order_by(Property.created_at.desc(), Property.id).all()

    def owner_dashboard_stats(self, owner_id: str) -> OwnerDashboardStats:
        """Counts over the owner's listings and the bookings made on them."""
        with self.db.session() as session:
            props = (
                session.query(
                    func.count(Property.id),
                    func.sum(case((Property.status == PropertyStatus.pending.value, 1), else_=0)),
                    func.sum(case((Property.status == PropertyStatus.verified.value, 1), else_=0)),
                )
                .filter(Property.owner_id == owner_id)
                .one()
            )
            books = (
                session.query(
                    func.count(Booking.id),
                    func.sum(case((Booking.status == BookingStatus.pending.value, 1), else_=0)),
                    func.sum(case((Booking.status == BookingStatus.approved.value, 1), else_=0)),
                )
                .join(Property, Booking.property_id == Property.id)
                .filter(Property.owner_id == owner_id)
                .one()
            )
        return OwnerDashboardStats(
            total_properties=props[0] or 0,
            pending_properties=props[1] or 0,
            verified_properties=props[2] or 0,
            total_bookings=books[0] or 0,
            pending_bookings=books[1] or 0,
            approved_bookings=books[2] or 0,
        )
