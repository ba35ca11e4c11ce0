"""
Database handle and session.

Schema source of truth: ownbroker.models. The ConnectionManager (ownbroker.connection)
runs SchemaManager.apply -> SchemaVerifier.check -> seed exactly once per process and
then hands out the single Database below. Every unit of work goes through
Database.session(), which serializes callers on the one shared connection.
"""
import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ownbroker.errors import InitializationError, translate_integrity_error

logger = logging.getLogger(__name__)

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ships with FK enforcement off; cascades depend on it.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


class Database:
    """One engine over exactly one DBAPI connection (no pool)."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        connect_args = {}
        if make_url(url).get_backend_name() == "sqlite":
            connect_args["check_same_thread"] = False
        self.engine = create_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args=connect_args,
        )
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self._session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )
        self._lock = threading.RLock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def safe_url(self) -> str:
        return make_url(self.url).render_as_string(hide_password=True)

    def ping(self) -> None:
        with self._lock:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        One transaction on the shared connection: commit on success, rollback on any
        exception. Integrity errors surface as ConstraintViolation.
        """
        with self._lock:
            if self._closed:
                raise InitializationError("Database connection is closed.")
            session = self._session_factory()
            try:
                yield session
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise translate_integrity_error(exc) from exc
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self.engine.dispose()
            logger.info("[DB] Connection to %s closed.", self.safe_url)
