"""Shared fixtures: a fresh SQLite file per test, initialized through ConnectionManager."""
import pytest

from ownbroker.config import Settings
from ownbroker.connection import ConnectionManager
from ownbroker.models.user import User, UserRole, UserStatus
from ownbroker.services.bookings import BookingWorkflow
from ownbroker.services.contact_messages import ContactMessageService
from ownbroker.services.notifications import NotificationDispatcher
from ownbroker.services.properties import PropertyWorkflow
from ownbroker.services.role_requests import RoleRequestWorkflow
from ownbroker.services.settings_store import SettingsStore
from ownbroker.services.users import UserModeration


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        seed_bootstrap_accounts=True,
        bcrypt_rounds=4,
        sql_echo=False,
    )


@pytest.fixture
def connections(settings):
    manager = ConnectionManager(settings)
    yield manager
    manager.release()


@pytest.fixture
def db(connections):
    return connections.acquire()


@pytest.fixture
def notifier(db):
    return NotificationDispatcher(db)


@pytest.fixture
def settings_store(db):
    return SettingsStore(db)


@pytest.fixture
def role_requests(db, notifier):
    return RoleRequestWorkflow(db, notifier)


@pytest.fixture
def properties(db, notifier):
    return PropertyWorkflow(db, notifier)


@pytest.fixture
def bookings(db, notifier):
    return BookingWorkflow(db, notifier)


@pytest.fixture
def moderation(db, notifier, settings_store):
    return UserModeration(db, notifier, settings_store=settings_store, bcrypt_rounds=4)


@pytest.fixture
def contact(db, notifier):
    return ContactMessageService(db, notifier)


@pytest.fixture
def make_user(db):
    """Insert a user directly. Returns the uid."""
    def _make(uid, role=UserRole.user, status=UserStatus.active, name=None, email=None):
        with db.session() as session:
            session.add(
                User(
                    uid=uid,
                    name=name or uid.title(),
                    email=email or f"{uid}@example.com",
                    password_hash="not-a-real-hash",
                    role=UserRole(role).value,
                    status=UserStatus(status).value,
                )
            )
        return uid

    return _make


@pytest.fixture
def verified_property(properties, make_user):
    """An owner with one verified listing. Returns the Property."""
    owner_id = make_user("olivia", role=UserRole.owner)
    prop = properties.create(owner_id, {"title": "Lake House", "price": 120.0, "city": "Pune"})
    return properties.approve(prop.id)