"""Owner role requests: submit -> pending -> approved | rejected (-> pending again on resubmit)."""
import logging

from sqlalchemy.sql import func

from ownbroker.database import Database
from ownbroker.errors import InvalidRequest, NotFound, PolicyViolation, StateConflict
from ownbroker.models.notification import NotificationKind
from ownbroker.models.role_request import RoleRequest, RoleRequestStatus
from ownbroker.models.user import User, UserRole, UserStatus
from ownbroker.services.notifications import NotificationDispatcher
from ownbroker.services.transitions import raise_not_applied

logger = logging.getLogger(__name__)


class RoleRequestWorkflow:
    def __init__(self, db: Database, notifier: NotificationDispatcher):
        self.db = db
        self.notifier = notifier

    def submit(self, user_id: str, message: str | None = None) -> RoleRequest:
        """Create the user's request, or reopen it in place after a rejection."""
        with self.db.session() as session:
            user = session.get(User, user_id)
            if user is None:
                raise NotFound("User not found.")
            if user.status != UserStatus.active.value:
                raise PolicyViolation("Only active accounts can request the owner role.")
            if user.role != UserRole.user.value:
                raise PolicyViolation(f"Account already has role '{user.role}'.")

            existing = session.query(RoleRequest).filter(RoleRequest.user_id == user_id).first()
            if existing is None:
                request = RoleRequest(
                    user_id=user.uid,
                    user_name=user.name,
                    user_email=user.email,
                    requested_role=UserRole.owner.value,
                    status=RoleRequestStatus.pending.value,
                )
                session.add(request)
                session.flush()
                request_id = request.id
            elif existing.status != RoleRequestStatus.rejected.value:
                raise StateConflict(
                    f"A role request already exists ({existing.status}).",
                    current_status=existing.status,
                )
            else:
                request_id = existing.id
                rows = (
                    session.query(RoleRequest)
                    .filter(RoleRequest.id == request_id, RoleRequest.status == RoleRequestStatus.rejected.value)
                    .update(
                        {
                            RoleRequest.status: RoleRequestStatus.pending.value,
                            RoleRequest.user_name: user.name,
                            RoleRequest.user_email: user.email,
                            RoleRequest.request_timestamp: func.now(),
                            RoleRequest.action_timestamp: None,
                            RoleRequest.admin_notes: None,
                        },
                        synchronize_session=False,
                    )
                )
                if rows == 0:
                    raise_not_applied(session, RoleRequest, request_id, "Role request", "rejected")
            request = session.get(RoleRequest, request_id, populate_existing=True)

        logger.info("[RoleRequest] %s submitted by %s%s", request_id, user_id, f": {message}" if message else "")
        self.notifier.notify(
            user_id,
            NotificationKind.role_request_status,
            "Owner Role Request Submitted",
            "Your request to become an owner has been received and is awaiting review.",
            related_id=request_id,
        )
        return request

    def approve(self, request_id: int, user_id: str, admin_notes: str | None = None) -> RoleRequest:
        """Approve the request and promote the user to owner in one transaction."""
        notes = (admin_notes or "").strip() or "Approved"
        with self.db.session() as session:
            rows = (
                session.query(RoleRequest)
                .filter(
                    RoleRequest.id == request_id,
                    RoleRequest.user_id == user_id,
                    RoleRequest.status == RoleRequestStatus.pending.value,
                )
                .update(
                    {
                        RoleRequest.status: RoleRequestStatus.approved.value,
                        RoleRequest.action_timestamp: func.now(),
                        RoleRequest.admin_notes: notes,
                    },
                    synchronize_session=False,
                )
            )
            if rows == 0:
                self._not_applied(session, request_id, user_id)
            promoted = (
                session.query(User)
                .filter(User.uid == user_id)
                .update(
                    {User.role: UserRole.owner.value, User.status: UserStatus.active.value},
                    synchronize_session=False,
                )
            )
            if promoted == 0:
                raise NotFound("User not found.")
            request = session.get(RoleRequest, request_id, populate_existing=True)

        logger.info("[RoleRequest] %s approved; user %s is now an owner", request_id, user_id)
        self.notifier.notify(
            user_id,
            NotificationKind.role_request_status,
            "Owner Role Request Approved",
            "Congratulations! Your request to become an owner has been approved. You can now list properties.",
            related_id=request_id,
        )
        return request

    def reject(self, request_id: int, user_id: str, admin_notes: str) -> RoleRequest:
        notes = (admin_notes or "").strip()
        if not notes:
            raise InvalidRequest("A reason is required to reject a role request.")
        with self.db.session() as session:
            rows = (
                session.query(RoleRequest)
                .filter(
                    RoleRequest.id == request_id,
                    RoleRequest.user_id == user_id,
                    RoleRequest.status == RoleRequestStatus.pending.value,
                )
                .update(
                    {
                        RoleRequest.status: RoleRequestStatus.rejected.value,
                        RoleRequest.action_timestamp: func.now(),
                        RoleRequest.admin_notes: notes,
                    },
                    synchronize_session=False,
                )
            )
            if rows == 0:
                self._not_applied(session, request_id, user_id)
            request = session.get(RoleRequest, request_id, populate_existing=True)

        logger.info("[RoleRequest] %s rejected", request_id)
        self.notifier.notify(
            user_id,
            NotificationKind.role_request_status,
            "Owner Role Request Rejected",
            f"Reason: {notes}",
            related_id=request_id,
        )
        return request

    def _not_applied(self, session, request_id: int, user_id: str):
        request = session.get(RoleRequest, request_id, populate_existing=True)
        if request is not None and request.user_id != user_id:
            raise NotFound("Role request not found for this user.")
        raise_not_applied(session, RoleRequest, request_id, "Role request", "pending")

    def get_for_user(self, user_id: str) -> RoleRequest | None:
        with self.db.session() as session:
            return session.query(RoleRequest).filter(RoleRequest.user_id == user_id).first()

    def list_requests(self, status: RoleRequestStatus | str | None = None) -> list[RoleRequest]:
        with self.db.session() as session:
            q = session.query(RoleRequest)
            if status is not None:
                q = q.filter(RoleRequest.status == RoleRequestStatus(status).value)
            return q.order_by(RoleRequest.request_timestamp.desc(), RoleRequest.id.desc()).all()
