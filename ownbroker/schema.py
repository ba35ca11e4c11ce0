"""Idempotent schema creation and seeding."""
import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Connection

from ownbroker.config import Settings, get_settings
from ownbroker.database import Base, Database
from ownbroker import models  # noqa: F401  (registers every table on Base.metadata)
from ownbroker.seed import seed_bootstrap_accounts, seed_default_settings

logger = logging.getLogger(__name__)


class SchemaManager:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def apply(self, conn: Connection) -> None:
        """Create missing tables, then missing indexes. A no-op on a correct schema."""
        Base.metadata.create_all(conn, checkfirst=True)
        # create_all skips indexes of tables that already exist; repair those one by one
        inspector = inspect(conn)
        for table in Base.metadata.sorted_tables:
            live_columns = {c["name"] for c in inspector.get_columns(table.name)}
            for index in table.indexes:
                missing = [c.name for c in index.columns if c.name not in live_columns]
                if missing:
                    # Drifted table; leave it untouched and let verification report it
                    logger.warning(
                        "[Schema] Not creating %s: %s lacks column(s) %s",
                        index.name,
                        table.name,
                        ", ".join(missing),
                    )
                    continue
                index.create(conn, checkfirst=True)
        logger.info("[Schema] %d tables ensured", len(Base.metadata.tables))

    def seed(self, db: Database) -> None:
        with db.session() as session:
            seed_default_settings(session)
            if self.settings.seed_bootstrap_accounts:
                seed_bootstrap_accounts(session, rounds=self.settings.bcrypt_rounds)
