"""
Process-wide owner of the single Database handle.

The first acquire() opens the store, creates/repairs the schema, verifies it and seeds
it; concurrent callers wait for that one initialization and then share its result.
A failed initialization leaves nothing behind, so the next acquire() starts over.
"""
import atexit
import enum
import logging
import signal
import threading
from typing import Callable

from ownbroker.config import Settings, get_settings
from ownbroker.database import Database
from ownbroker.errors import InitializationError, SchemaIntegrityError
from ownbroker.schema import SchemaManager
from ownbroker.schema_verify import SchemaVerifier

logger = logging.getLogger(__name__)


class ConnectionState(str, enum.Enum):
    empty = "empty"
    initializing = "initializing"
    ready = "ready"


class ConnectionManager:
    def __init__(
        self,
        settings: Settings | None = None,
        schema_manager: SchemaManager | None = None,
        verifier: SchemaVerifier | None = None,
        database_factory: Callable[[str, bool], Database] | None = None,
    ):
        self.settings = settings or get_settings()
        self.schema_manager = schema_manager or SchemaManager(self.settings)
        self.verifier = verifier or SchemaVerifier()
        self._database_factory = database_factory or Database
        self._cond = threading.Condition(threading.Lock())
        self._state = ConnectionState.empty
        self._db: Database | None = None
        self._attempt = 0
        # (attempt number, exception) of the last failed initialization
        self._failure: tuple[int, Exception] | None = None
        self._hook_installed = False

    @property
    def state(self) -> ConnectionState:
        with self._cond:
            return self._state

    def acquire(self) -> Database:
        """Return the shared handle, initializing it on first use."""
        with self._cond:
            while True:
                if self._state is ConnectionState.ready:
                    return self._db
                if self._state is ConnectionState.empty:
                    self._state = ConnectionState.initializing
                    self._attempt += 1
                    attempt = self._attempt
                    break
                attempt = self._attempt
                self._cond.wait_for(
                    lambda: self._state is not ConnectionState.initializing or self._attempt != attempt
                )
                if self._failure is not None and self._failure[0] == attempt:
                    raise _failure_for_waiter(self._failure[1]) from self._failure[1]

        # The slow part runs without the lock; waiters sleep on the condition
        try:
            db = self._initialize()
        except Exception as exc:
            if isinstance(exc, (SchemaIntegrityError, InitializationError)):
                failure = exc
            else:
                failure = InitializationError(f"Database initialization failed: {exc}")
            with self._cond:
                self._failure = (attempt, failure)
                self._state = ConnectionState.empty
                self._cond.notify_all()
            logger.error("[DB] Initialization attempt %d failed: %s", attempt, failure.message)
            if failure is exc:
                raise
            raise failure from exc

        with self._cond:
            self._db = db
            self._failure = None
            self._state = ConnectionState.ready
            self._cond.notify_all()
        logger.info("[DB] Ready: %s", db.safe_url)
        return db

    def _initialize(self) -> Database:
        db = self._database_factory(self.settings.database_url, self.settings.sql_echo)
        try:
            logger.info("[DB] Opening %s", db.safe_url)
            with db.engine.begin() as conn:
                self.schema_manager.apply(conn)
            with db.engine.connect() as conn:
                self.verifier.check(conn)
            self.schema_manager.seed(db)
        except Exception:
            db.close()
            raise
        return db

    def release(self) -> None:
        """Dispose the handle and return to the empty state. Safe to call repeatedly."""
        with self._cond:
            if self._state is ConnectionState.initializing:
                # Nothing published yet; the initializer owns (and on failure closes) its handle
                logger.warning("[DB] release() called during initialization; ignored")
                return
            db, self._db = self._db, None
            self._state = ConnectionState.empty
        if db is not None:
            db.close()

    def install_shutdown_hook(self, signals=(signal.SIGINT, signal.SIGTERM)) -> None:
        """Release on interpreter exit and on the given signals (main thread only)."""
        if self._hook_installed:
            return
        self._hook_installed = True
        atexit.register(self.release)
        for signum in signals:
            previous = signal.getsignal(signum)

            def handler(received, frame, previous=previous):
                logger.info("[DB] Signal %s received; closing database", received)
                self.release()
                if callable(previous):
                    previous(received, frame)
                elif previous is signal.SIG_DFL:
                    raise SystemExit(0)

            signal.signal(signum, handler)


def _failure_for_waiter(exc: Exception) -> Exception:
    # Each waiter raises its own instance; sharing one exception object across threads
    # would mix up tracebacks
    if isinstance(exc, SchemaIntegrityError):
        return SchemaIntegrityError(exc.problems)
    return InitializationError(exc.message if isinstance(exc, InitializationError) else str(exc))
