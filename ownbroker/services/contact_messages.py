"""Contact support inbox."""
import logging

from sqlalchemy.sql import func

from ownbroker.database import Database
from ownbroker.errors import InvalidRequest, NotFound
from ownbroker.models.contact_message import ContactMessage, ContactMessageStatus
from ownbroker.models.notification import NotificationKind
from ownbroker.services.notifications import NotificationDispatcher
from ownbroker.services.transitions import raise_not_applied

logger = logging.getLogger(__name__)


class ContactMessageService:
    def __init__(self, db: Database, notifier: NotificationDispatcher):
        self.db = db
        self.notifier = notifier

    def submit(
        self,
        name: str,
        email: str,
        subject: str,
        message: str,
        user_id: str | None = None,
    ) -> ContactMessage:
        fields = {"name": name, "email": email, "subject": subject, "message": message}
        fields = {k: (v or "").strip() for k, v in fields.items()}
        missing = [k for k, v in fields.items() if not v]
        if missing:
            raise InvalidRequest(f"Missing required field(s): {', '.join(missing)}.")
        with self.db.session() as session:
            msg = ContactMessage(user_id=user_id, status=ContactMessageStatus.unseen.value, **fields)
            session.add(msg)
            session.flush()
            msg = session.get(ContactMessage, msg.id, populate_existing=True)
        logger.info("[Contact] Message %s received from %s", msg.id, fields["email"])
        return msg

    def list_messages(self, status: ContactMessageStatus | str | None = None) -> list[ContactMessage]:
        with self.db.session() as session:
            q = session.query(ContactMessage)
            if status is not None:
                q = q.filter(ContactMessage.status == ContactMessageStatus(status).value)
            return q.order_by(ContactMessage.timestamp.desc(), ContactMessage.id.desc()).all()

    def list_for_user(self, user_id: str) -> list[ContactMessage]:
        with self.db.session() as session:
            return (
                session.query(ContactMessage)
                .filter(ContactMessage.user_id == user_id)
                .order_by(ContactMessage.timestamp.desc(), ContactMessage.id.desc())
                .all()
            )

    def mark_seen(self, message_id: int) -> ContactMessage:
        with self.db.session() as session:
            rows = (
                session.query(ContactMessage)
                .filter(ContactMessage.id == message_id, ContactMessage.status == ContactMessageStatus.unseen.value)
                .update({ContactMessage.status: ContactMessageStatus.seen.value}, synchronize_session=False)
            )
            if rows == 0:
                raise_not_applied(session, ContactMessage, message_id, "Message", "unseen")
            return session.get(ContactMessage, message_id, populate_existing=True)

    def reply(self, message_id: int, reply_text: str) -> ContactMessage:
        reply_text = (reply_text or "").strip()
        if not reply_text:
            raise InvalidRequest("Reply text is required.")
        with self.db.session() as session:
            rows = (
                session.query(ContactMessage)
                .filter(ContactMessage.id == message_id)
                .update(
                    {
                        ContactMessage.reply_text: reply_text,
                        ContactMessage.reply_timestamp: func.now(),
                        ContactMessage.has_admin_reply: 1,
                        ContactMessage.status: ContactMessageStatus.seen.value,
                    },
                    synchronize_session=False,
                )
            )
            if rows == 0:
                raise NotFound("Message not found.")
            msg = session.get(ContactMessage, message_id, populate_existing=True)
        logger.info("[Contact] Replied to message %s", message_id)
        if msg.user_id:
            self.notifier.notify(
                msg.user_id,
                NotificationKind.contact_reply,
                f"Reply: {msg.subject}",
                reply_text,
                related_id=message_id,
            )
        return msg

    def delete(self, message_id: int) -> None:
        with self.db.session() as session:
            if session.query(ContactMessage).filter(ContactMessage.id == message_id).delete(synchronize_session=False) == 0:
                raise NotFound("Message not found.")
