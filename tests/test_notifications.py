import logging

from ownbroker.database import Database
from ownbroker.services.notifications import NotificationDispatcher
from ownbroker.services.role_requests import RoleRequestWorkflow
from ownbroker.models.user import User


class TestDispatcher:
    def test_notify_and_mark_read(self, notifier, make_user):
        uid = make_user("uma")
        notifier.notify(uid, "booking_status", "Hello", "World", related_id=42)
        [note] = notifier.list_for_user(uid)
        assert note.related_id == "42"
        assert note.status == "unread"

        assert notifier.mark_read(note.id, uid) is True
        assert notifier.mark_read(note.id, uid) is False
        assert notifier.list_for_user(uid, status="unread") == []

    def test_mark_read_is_owner_scoped(self, notifier, make_user):
        uid, other = make_user("uma"), make_user("vic")
        notifier.notify(uid, "account_status", "T", "M")
        [note] = notifier.list_for_user(uid)
        assert notifier.mark_read(note.id, other) is False

    def test_mark_all_read(self, notifier, make_user):
        uid = make_user("uma")
        notifier.notify(uid, "account_status", "A", "1")
        notifier.notify(uid, "account_status", "B", "2")
        assert notifier.mark_all_read(uid) == 2

    def test_failed_insert_is_logged_not_raised(self, notifier, caplog):
        with caplog.at_level(logging.WARNING):
            # FK violation: no such user
            notifier.notify("ghost", "account_status", "T", "M")
        assert "Delivery failed" in caplog.text


class TestDeliveryAfterCommit:
    def test_approval_survives_notification_failure(self, db, settings, make_user, caplog):
        broken = Database(settings.database_url)
        broken.close()
        workflow = RoleRequestWorkflow(db, NotificationDispatcher(broken))
        uid = make_user("uma")

        with caplog.at_level(logging.WARNING):
            request = workflow.submit(uid)
            approved = workflow.approve(request.id, uid)

        assert approved.status == "approved"
        with db.session() as session:
            assert session.get(User, uid).role == "owner"
        assert caplog.text.count("Delivery failed") == 2
