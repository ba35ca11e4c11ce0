import pytest

from ownbroker.errors import InvalidRequest, NotFound, StateConflict


class TestContactMessages:
    def test_guest_message_is_unseen(self, contact):
        msg = contact.submit("Guest", "guest@example.com", "Question", "Is parking included?")
        assert msg.status == "unseen"
        assert msg.user_id is None
        assert msg.has_admin_reply == 0

    def test_required_fields(self, contact):
        with pytest.raises(InvalidRequest):
            contact.submit("Guest", "", "Question", "Body")

    def test_mark_seen_once(self, contact):
        msg = contact.submit("Guest", "guest@example.com", "Q", "Body")
        assert contact.mark_seen(msg.id).status == "seen"
        with pytest.raises(StateConflict):
            contact.mark_seen(msg.id)
        with pytest.raises(NotFound):
            contact.mark_seen(9999)

    def test_reply_sets_fields_and_notifies_user(self, contact, notifier, make_user):
        uid = make_user("uma")
        msg = contact.submit("Uma", "uma@example.com", "Refund", "Please help", user_id=uid)
        replied = contact.reply(msg.id, "Refund issued.")
        assert replied.reply_text == "Refund issued."
        assert replied.reply_timestamp is not None
        assert replied.has_admin_reply == 1
        assert replied.status == "seen"
        [note] = notifier.list_for_user(uid)
        assert note.type == "contact_reply"
        assert note.related_id == str(msg.id)

    def test_reply_requires_text(self, contact):
        msg = contact.submit("Guest", "guest@example.com", "Q", "Body")
        with pytest.raises(InvalidRequest):
            contact.reply(msg.id, " ")

    def test_listing_and_delete(self, contact, make_user):
        uid = make_user("uma")
        mine = contact.submit("Uma", "uma@example.com", "A", "1", user_id=uid)
        contact.submit("Guest", "guest@example.com", "B", "2")
        assert [m.id for m in contact.list_for_user(uid)] == [mine.id]
        assert len(contact.list_messages(status="unseen")) == 2
        contact.delete(mine.id)
        with pytest.raises(NotFound):
            contact.delete(mine.id)
