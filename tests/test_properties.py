from datetime import date

import pytest

from ownbroker.errors import InvalidRequest, NotFound, PolicyViolation, StateConflict
from ownbroker.models.booking import Booking
from ownbroker.models.user import UserRole


class TestCreateAndUpdate:
    def test_create_is_always_pending(self, properties, make_user):
        owner = make_user("olivia", role=UserRole.owner)
        prop = properties.create(owner, {"title": "Flat", "price": 50, "status": "verified", "facing": "North-East"})
        assert prop.status == "pending"
        assert prop.facing == "North-East"
        assert prop.owner_id == owner

    def test_plain_users_cannot_list(self, properties, make_user):
        uid = make_user("uma")
        with pytest.raises(PolicyViolation):
            properties.create(uid, {"title": "Flat", "price": 50})

    def test_create_validates_input(self, properties, make_user):
        owner = make_user("olivia", role=UserRole.owner)
        with pytest.raises(InvalidRequest):
            properties.create(owner, {"title": " ", "price": 50})
        with pytest.raises(InvalidRequest):
            properties.create(owner, {"title": "Flat", "price": 0})
        with pytest.raises(InvalidRequest):
            properties.create(owner, {"title": "Flat", "price": 10, "facing": "Up"})

    def test_edit_reopens_rejected_listing(self, properties, make_user):
        owner = make_user("olivia", role=UserRole.owner)
        prop = properties.create(owner, {"title": "Flat", "price": 50})
        properties.reject(prop.id, "Blurry photos")
        updated = properties.update(prop.id, owner, {"image_url": "/img/new.png"})
        assert updated.status == "pending"
        assert updated.image_url == "/img/new.png"

    def test_edit_keeps_verified_status(self, properties, verified_property):
        updated = properties.update(verified_property.id, verified_property.owner_id, {"price": 150})
        assert updated.status == "verified"
        assert updated.price == 150

    def test_edit_is_owner_scoped(self, properties, verified_property, make_user):
        intruder = make_user("ivan", role=UserRole.owner)
        with pytest.raises(NotFound):
            properties.update(verified_property.id, intruder, {"price": 1})


class TestModeration:
    def test_approve_notifies_owner(self, properties, notifier, make_user):
        owner = make_user("olivia", role=UserRole.owner)
        prop = properties.create(owner, {"title": "Flat", "price": 50})
        assert properties.approve(prop.id).status == "verified"
        assert [n.type for n in notifier.list_for_user(owner)] == ["property_status"]

    def test_decisions_only_from_pending(self, properties, verified_property):
        with pytest.raises(StateConflict):
            properties.approve(verified_property.id)
        with pytest.raises(StateConflict):
            properties.reject(verified_property.id, "late")
        with pytest.raises(NotFound):
            properties.approve("missing")

    def test_reject_requires_reason(self, properties, make_user):
        owner = make_user("olivia", role=UserRole.owner)
        prop = properties.create(owner, {"title": "Flat", "price": 50})
        with pytest.raises(InvalidRequest):
            properties.reject(prop.id, "")
        assert properties.get(prop.id).status == "pending"


class TestDelete:
    def test_delete_cascades_to_bookings(self, db, properties, bookings, verified_property, make_user):
        guest = make_user("gia")
        booking = bookings.request(guest, verified_property.id, date(2026, 1, 1), date(2026, 1, 3))
        properties.delete(verified_property.id)
        with db.session() as session:
            assert session.get(Booking, booking.id) is None

    def test_owner_delete_is_scoped(self, properties, verified_property, make_user):
        intruder = make_user("ivan", role=UserRole.owner)
        with pytest.raises(NotFound):
            properties.delete(verified_property.id, owner_id=intruder)
        properties.delete(verified_property.id, owner_id=verified_property.owner_id)
        with pytest.raises(NotFound):
            properties.get(verified_property.id)

    def test_list_filters(self, properties, verified_property, make_user):
        owner = make_user("otto", role=UserRole.owner)
        properties.create(owner, {"title": "Studio", "price": 30})
        assert [p.id for p in properties.list_properties(status="verified")] == [verified_property.id]
        assert len(properties.list_properties(owner_id=owner)) == 1

    def test_price_is_coerced_or_refused(self, properties, make_user):
        owner = make_user("olivia", role=UserRole.owner)
        prop = properties.create(owner, {"title": "Flat", "price": "75"})
        assert prop.price == 75.0
        with pytest.raises(InvalidRequest):
            properties.create(owner, {"title": "Flat", "price": "cheap"})
        with pytest.raises(InvalidRequest):
            properties.update(prop.id, owner, {"price": None})


class TestOwnerDashboard:
    def test_counts_listings_and_their_bookings(self, properties, bookings, verified_property, make_user):
        owner = verified_property.owner_id
        properties.create(owner, {"title": "Studio", "price": 30})
        guest = make_user("gia")
        first = bookings.request(guest, verified_property.id, date(2026, 7, 1), date(2026, 7, 3))
        bookings.request(guest, verified_property.id, date(2026, 8, 1), date(2026, 8, 3))
        bookings.approve(first.id, owner)

        stats = properties.owner_dashboard_stats(owner)
        assert stats.total_properties == 2
        assert stats.pending_properties == 1
        assert stats.verified_properties == 1
        assert stats.total_bookings == 2
        assert stats.pending_bookings == 1
        assert stats.approved_bookings == 1

    def test_owner_without_listings(self, properties, make_user):
        stats = properties.owner_dashboard_stats(make_user("otto", role=UserRole.owner))
        assert stats.total_properties == 0
        assert stats.total_bookings == 0
