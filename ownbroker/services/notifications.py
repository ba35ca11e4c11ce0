"""In-app notifications. Delivery is best effort: a failed insert is logged, never raised."""
import logging

from ownbroker.database import Database
from ownbroker.errors import NotificationDeliveryFailure
from ownbroker.models.notification import Notification, NotificationKind, NotificationStatus

logger = logging.getLogger(__name__)

# Column limits (kept generous; titles are short by construction)
_TITLE_LEN = 255
_MESSAGE_LEN = 10_000


class NotificationDispatcher:
    def __init__(self, db: Database):
        self.db = db

    def notify(
        self,
        user_id: str,
        kind: NotificationKind | str,
        title: str,
        message: str,
        related_id: str | int | None = None,
    ) -> None:
        """Write one notification in its own transaction.

        Call only after the triggering change has committed.
        """
        kind_value = kind.value if isinstance(kind, NotificationKind) else str(kind)
        try:
            with self.db.session() as session:
                session.add(
                    Notification(
                        user_id=user_id,
                        type=kind_value,
                        title=(title or "")[:_TITLE_LEN],
                        message=(message or "")[:_MESSAGE_LEN],
                        related_id=str(related_id) if related_id is not None else None,
                    )
                )
        except Exception as exc:
            failure = NotificationDeliveryFailure(f"{kind_value} for user {user_id}: {exc}")
            logger.warning("[Notify] Delivery failed: %s", failure.message)
            return
        logger.debug("[Notify] %s -> %s", kind_value, user_id)

    def list_for_user(self, user_id: str, status: NotificationStatus | None = None) -> list[Notification]:
        with self.db.session() as session:
            q = session.query(Notification).filter(Notification.user_id == user_id)
            if status is not None:
                q = q.filter(Notification.status == NotificationStatus(status).value)
            return q.order_by(Notification.created_at.desc(), Notification.id.desc()).all()

    def mark_read(self, notification_id: int, user_id: str) -> bool:
        """True when an unread notification owned by user_id was marked read."""
        with self.db.session() as session:
            rows = (
                session.query(Notification)
                .filter(
                    Notification.id == notification_id,
                    Notification.user_id == user_id,
                    Notification.status == NotificationStatus.unread.value,
                )
                .update({Notification.status: NotificationStatus.read.value}, synchronize_session=False)
            )
        return rows == 1

    def mark_all_read(self, user_id: str) -> int:
        with self.db.session() as session:
            return (
                session.query(Notification)
                .filter(Notification.user_id == user_id, Notification.status == NotificationStatus.unread.value)
                .update({Notification.status: NotificationStatus.read.value}, synchronize_session=False)
            )
