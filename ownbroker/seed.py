"""Seed data: default platform settings and the development bootstrap accounts."""
import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from ownbroker.models.platform_setting import PlatformSetting
from ownbroker.models.user import User, UserRole, UserStatus
from ownbroker.services.auth import get_password_hash, verify_password
from ownbroker.services.settings_store import default_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BootstrapAccount:
    uid: str
    name: str
    email: str
    password: str
    role: UserRole
    status: UserStatus = UserStatus.active


# Development only. Disabled with SEED_BOOTSTRAP_ACCOUNTS=false.
BOOTSTRAP_ACCOUNTS = (
    BootstrapAccount("seed-owner", "Demo Owner", "owner@ownbroker.com", "Owner@123", UserRole.owner),
    BootstrapAccount("seed-user", "Demo User", "user@ownbroker.com", "User@123", UserRole.user),
    BootstrapAccount("seed-admin", "Platform Admin", "admin@ownbroker.com", "Admin@123", UserRole.admin),
)


def seed_default_settings(db: Session) -> int:
    """Insert defaults for keys that have no row. Existing values are never touched."""
    existing = {key for (key,) in db.query(PlatformSetting.key).all()}
    inserted = 0
    for key, value in default_rows().items():
        if key in existing:
            continue
        db.add(PlatformSetting(key=key, value=value))
        inserted += 1
    if inserted:
        logger.info("[Seed] Inserted %d default platform setting(s)", inserted)
    return inserted


def seed_bootstrap_accounts(db: Session, rounds: int | None = None) -> tuple[int, int]:
    """Insert missing bootstrap accounts; refresh drifted ones in place (uid is kept).

    Returns (inserted, updated).
    """
    inserted = updated = 0
    for account in BOOTSTRAP_ACCOUNTS:
        user = db.query(User).filter(User.email == account.email).first()
        if user is None:
            db.add(
                User(
                    uid=account.uid,
                    name=account.name,
                    email=account.email,
                    password_hash=get_password_hash(account.password, rounds=rounds),
                    role=account.role.value,
                    status=account.status.value,
                )
            )
            inserted += 1
            continue
        drifted = (
            user.name != account.name
            or user.role != account.role.value
            or user.status != account.status.value
            or not verify_password(account.password, user.password_hash)
        )
        if not drifted:
            continue
        user.name = account.name
        user.role = account.role.value
        user.status = account.status.value
        if not verify_password(account.password, user.password_hash):
            user.password_hash = get_password_hash(account.password, rounds=rounds)
        updated += 1
        logger.info("[Seed] Refreshed bootstrap account %s (uid=%s)", account.email, user.uid)
    if inserted:
        logger.info("[Seed] Inserted %d bootstrap account(s)", inserted)
    return inserted, updated
