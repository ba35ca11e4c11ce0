"""Shared dependencies: database handle, current user, workflows."""
from fastapi import Depends, Header, HTTPException, Request

from ownbroker.database import Database
from ownbroker.models.user import User, UserRole, UserStatus
from ownbroker.services.bookings import BookingWorkflow
from ownbroker.services.contact_messages import ContactMessageService
from ownbroker.services.notifications import NotificationDispatcher
from ownbroker.services.properties import PropertyWorkflow
from ownbroker.services.role_requests import RoleRequestWorkflow
from ownbroker.services.settings_store import SettingsStore
from ownbroker.services.users import UserModeration


def get_db(request: Request) -> Database:
    return request.app.state.connections.acquire()


def get_notifier(db: Database = Depends(get_db)) -> NotificationDispatcher:
    return NotificationDispatcher(db)


def get_current_user(
    db: Database = Depends(get_db),
    x_user_id: str | None = Header(None),
) -> User:
    """Caller identity as asserted by the upstream auth layer (X-User-Id header)."""
    uid = (x_user_id or "").strip()
    if not uid:
        raise HTTPException(status_code=401, detail="Not authenticated")
    with db.session() as session:
        user = session.get(User, uid)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    if user.status == UserStatus.suspended.value:
        raise HTTPException(status_code=403, detail="Account suspended")
    return user


def get_optional_user(
    db: Database = Depends(get_db),
    x_user_id: str | None = Header(None),
) -> User | None:
    uid = (x_user_id or "").strip()
    if not uid:
        return None
    with db.session() as session:
        return session.get(User, uid)


def require_owner(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role not in (UserRole.owner.value, UserRole.admin.value):
        raise HTTPException(status_code=403, detail="Owner role required")
    return current_user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRole.admin.value:
        raise HTTPException(status_code=403, detail="Admin role required")
    return current_user


def get_settings_store(db: Database = Depends(get_db)) -> SettingsStore:
    return SettingsStore(db)


def get_role_requests(
    db: Database = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> RoleRequestWorkflow:
    return RoleRequestWorkflow(db, notifier)


def get_properties(
    db: Database = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> PropertyWorkflow:
    return PropertyWorkflow(db, notifier)


def get_bookings(
    db: Database = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> BookingWorkflow:
    return BookingWorkflow(db, notifier)


def get_user_moderation(
    request: Request,
    db: Database = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> UserModeration:
    connections = request.app.state.connections
    return UserModeration(db, notifier, bcrypt_rounds=connections.settings.bcrypt_rounds)


def get_contact_messages(
    db: Database = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> ContactMessageService:
    return ContactMessageService(db, notifier)
