"""Admin moderation of accounts, plus self-registration."""
import logging

from sqlalchemy import func

from ownbroker.database import Database
from ownbroker.errors import ConstraintViolation, InvalidRequest, NotFound, PolicyViolation, StateConflict
from ownbroker.models.booking import Booking
from ownbroker.models.contact_message import ContactMessage, ContactMessageStatus
from ownbroker.models.notification import NotificationKind
from ownbroker.models.property import Property, PropertyStatus
from ownbroker.models.role_request import RoleRequest, RoleRequestStatus
from ownbroker.models.user import User, UserRole, UserStatus
from ownbroker.schemas.user import DashboardStats
from ownbroker.services.auth import get_password_hash
from ownbroker.services.notifications import NotificationDispatcher
from ownbroker.services.settings_store import SettingsStore
from ownbroker.services.transitions import new_id

logger = logging.getLogger(__name__)

_ASSIGNABLE_ROLES = (UserRole.user.value, UserRole.owner.value)


class UserModeration:
    def __init__(
        self,
        db: Database,
        notifier: NotificationDispatcher,
        settings_store: SettingsStore | None = None,
        bcrypt_rounds: int | None = None,
    ):
        self.db = db
        self.notifier = notifier
        self.settings_store = settings_store or SettingsStore(db)
        self.bcrypt_rounds = bcrypt_rounds

    def _load_non_admin(self, session, user_id: str) -> User:
        user = session.get(User, user_id)
        if user is None:
            raise NotFound("User not found.")
        if user.role == UserRole.admin.value:
            raise PolicyViolation("Admin accounts cannot be modified here.")
        return user

    def toggle_suspension(self, user_id: str) -> User:
        """active|pending -> suspended, suspended -> active. Never deletes anything."""
        with self.db.session() as session:
            user = self._load_non_admin(session, user_id)
            current = user.status
            target = UserStatus.active.value if current == UserStatus.suspended.value else UserStatus.suspended.value
            rows = (
                session.query(User)
                .filter(User.uid == user_id, User.status == current, User.role != UserRole.admin.value)
                .update({User.status: target}, synchronize_session=False)
            )
            if rows == 0:
                raise StateConflict("Account changed concurrently; retry.")
            user = session.get(User, user_id, populate_existing=True)
        logger.info("[User] %s status %s -> %s", user_id, current, target)
        if target == UserStatus.suspended.value:
            title, message = "Account Suspended", "Your account has been suspended. Contact support for help."
        else:
            title, message = "Account Reactivated", "Your account has been reactivated."
        self.notifier.notify(user_id, NotificationKind.account_status, title, message)
        return user

    def change_role(self, user_id: str, new_role: UserRole | str) -> User:
        role = new_role.value if isinstance(new_role, UserRole) else str(new_role)
        if role not in _ASSIGNABLE_ROLES:
            raise InvalidRequest("Role must be 'user' or 'owner'.")
        with self.db.session() as session:
            user = self._load_non_admin(session, user_id)
            current = user.role
            if current == role:
                return user
            rows = (
                session.query(User)
                .filter(User.uid == user_id, User.role == current)
                .update({User.role: role}, synchronize_session=False)
            )
            if rows == 0:
                raise StateConflict("Account changed concurrently; retry.")
            user = session.get(User, user_id, populate_existing=True)
        logger.info("[User] %s role %s -> %s", user_id, current, role)
        self.notifier.notify(
            user_id,
            NotificationKind.role_change,
            "Role Updated",
            f"Your account role has been changed to {role}.",
        )
        return user

    def delete(self, user_id: str) -> None:
        """Cascades to properties, bookings, role requests and notifications; contact messages are kept."""
        with self.db.session() as session:
            self._load_non_admin(session, user_id)
            session.query(User).filter(User.uid == user_id).delete(synchronize_session=False)
        logger.info("[User] %s deleted", user_id)

    def update_profile(self, user_id: str, name: str, mobile: str) -> User:
        """Self-service edit of name and mobile number."""
        name = (name or "").strip()
        mobile = (mobile or "").strip()
        if not name:
            raise InvalidRequest("Name is required.")
        if len(mobile) < 10:
            raise InvalidRequest("Mobile number must have at least 10 characters.")
        with self.db.session() as session:
            rows = (
                session.query(User)
                .filter(User.uid == user_id)
                .update({User.name: name, User.mobile: mobile}, synchronize_session=False)
            )
            if rows == 0:
                raise NotFound("User not found.")
            user = session.get(User, user_id, populate_existing=True)
        logger.info("[User] %s updated profile", user_id)
        return user

    def register(self, name: str, email: str, password: str, mobile: str | None = None) -> User:
        if not self.settings_store.get("allowNewRegistrations"):
            raise PolicyViolation("New registrations are currently disabled.")
        name = (name or "").strip()
        email = (email or "").strip().lower()
        if not name or not email or not password:
            raise InvalidRequest("Name, email and password are required.")
        password_hash = get_password_hash(password, rounds=self.bcrypt_rounds)
        with self.db.session() as session:
            if session.query(User.uid).filter(User.email == email).first() is not None:
                raise ConstraintViolation(ConstraintViolation.DUPLICATE, "Email is already registered.")
            user = User(
                uid=new_id(),
                name=name,
                email=email,
                password_hash=password_hash,
                role=UserRole.user.value,
                status=UserStatus.active.value,
                mobile=mobile,
            )
            session.add(user)
            session.flush()
            session.refresh(user)
        logger.info("[User] Registered %s (%s)", user.uid, email)
        return user

    def get(self, user_id: str) -> User:
        with self.db.session() as session:
            user = session.get(User, user_id)
        if user is None:
            raise NotFound("User not found.")
        return user

    def list_users(self, role: UserRole | str | None = None, status: UserStatus | str | None = None) -> list[User]:
        with self.db.session() as session:
            q = session.query(User)
            if role is not None:
                q = q.filter(User.role == UserRole(role).value)
            if status is not None:
                q = q.filter(User.status == UserStatus(status).value)
            return q.order_by(User.created_at.desc(), User.uid).all()

    def dashboard_stats(self) -> DashboardStats:
        with self.db.session() as session:
            def count(model, *criteria):
                q = session.query(func.count()).select_from(model)
                if criteria:
                    q = q.filter(*criteria)
                return q.scalar() or 0

            return DashboardStats(
                total_users=count(User),
                total_properties=count(Property),
                pending_properties=count(Property, Property.status == PropertyStatus.pending.value),
                pending_role_requests=count(RoleRequest, RoleRequest.status == RoleRequestStatus.pending.value),
                total_bookings=count(Booking),
                unseen_messages=count(ContactMessage, ContactMessage.status == ContactMessageStatus.unseen.value),
            )
