import signal
import threading
import time

import pytest

from ownbroker.connection import ConnectionManager, ConnectionState
from ownbroker.database import Database
from ownbroker.errors import InitializationError
from ownbroker.schema import SchemaManager


class CountingSchemaManager(SchemaManager):
    """Slow apply() so concurrent callers overlap with the initializer."""

    def __init__(self, settings, delay=0.2, fail_times=0):
        super().__init__(settings)
        self.delay = delay
        self.fail_times = fail_times
        self.apply_calls = 0
        self._lock = threading.Lock()

    def apply(self, conn):
        with self._lock:
            self.apply_calls += 1
            call = self.apply_calls
        time.sleep(self.delay)
        if call <= self.fail_times:
            raise RuntimeError("disk unavailable")
        super().apply(conn)


class TrackingDatabase(Database):
    opened = []

    def __init__(self, url, echo=False):
        super().__init__(url, echo)
        TrackingDatabase.opened.append(self)


@pytest.fixture(autouse=True)
def reset_tracking():
    TrackingDatabase.opened = []
    yield


class TestAcquire:
    def test_first_acquire_initializes_and_returns_ready_handle(self, settings):
        manager = ConnectionManager(settings)
        assert manager.state is ConnectionState.empty
        db = manager.acquire()
        assert manager.state is ConnectionState.ready
        assert manager.acquire() is db
        manager.release()

    def test_concurrent_acquire_runs_one_initialization(self, settings):
        schema = CountingSchemaManager(settings)
        manager = ConnectionManager(settings, schema_manager=schema, database_factory=TrackingDatabase)
        results, errors = [], []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            try:
                results.append(manager.acquire())
            except Exception as exc:  # collected for the assertion below
                errors.append(exc)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(10)

        assert errors == []
        assert len(results) == 8
        assert all(db is results[0] for db in results)
        assert schema.apply_calls == 1
        assert len(TrackingDatabase.opened) == 1
        manager.release()


class TestFailure:
    def test_failure_unwinds_and_next_acquire_retries(self, settings):
        schema = CountingSchemaManager(settings, delay=0, fail_times=1)
        manager = ConnectionManager(settings, schema_manager=schema, database_factory=TrackingDatabase)

        with pytest.raises(InitializationError) as info:
            manager.acquire()
        assert "disk unavailable" in info.value.message
        assert isinstance(info.value.__cause__, RuntimeError)
        assert manager.state is ConnectionState.empty
        assert TrackingDatabase.opened[0].closed

        db = manager.acquire()
        assert manager.state is ConnectionState.ready
        assert schema.apply_calls == 2
        assert not db.closed
        assert db is TrackingDatabase.opened[1]
        manager.release()

    def test_waiters_receive_the_initialization_failure(self, settings):
        schema = CountingSchemaManager(settings, delay=0.3, fail_times=100)
        manager = ConnectionManager(settings, schema_manager=schema)
        errors = []

        def worker():
            try:
                manager.acquire()
            except InitializationError as exc:
                errors.append(exc)

        first = threading.Thread(target=worker)
        first.start()
        time.sleep(0.05)
        waiters = [threading.Thread(target=worker) for _ in range(3)]
        for t in waiters:
            t.start()
        for t in [first] + waiters:
            t.join(10)

        assert len(errors) == 4
        assert manager.state is ConnectionState.empty


class TestRelease:
    def test_release_is_idempotent(self, settings):
        manager = ConnectionManager(settings)
        db = manager.acquire()
        manager.release()
        manager.release()
        assert db.closed
        assert manager.state is ConnectionState.empty

    def test_release_before_acquire_is_a_no_op(self, settings):
        manager = ConnectionManager(settings)
        manager.release()
        assert manager.state is ConnectionState.empty

    def test_acquire_after_release_opens_a_new_handle(self, settings):
        manager = ConnectionManager(settings)
        first = manager.acquire()
        manager.release()
        second = manager.acquire()
        assert second is not first
        assert not second.closed
        manager.release()

    def test_closed_handle_refuses_new_sessions(self, settings):
        manager = ConnectionManager(settings)
        db = manager.acquire()
        manager.release()
        with pytest.raises(InitializationError):
            with db.session():
                pass


@pytest.fixture
def sigusr1():
    original = signal.getsignal(signal.SIGUSR1)
    yield signal.SIGUSR1
    signal.signal(signal.SIGUSR1, original)


class TestShutdownHook:
    def test_ignored_signal_stays_ignored(self, settings, sigusr1):
        signal.signal(sigusr1, signal.SIG_IGN)
        manager = ConnectionManager(settings)
        db = manager.acquire()
        manager.install_shutdown_hook(signals=(sigusr1,))

        signal.getsignal(sigusr1)(sigusr1, None)

        assert db.closed
        assert manager.state is ConnectionState.empty

    def test_default_action_exits(self, settings, sigusr1):
        signal.signal(sigusr1, signal.SIG_DFL)
        manager = ConnectionManager(settings)
        manager.acquire()
        manager.install_shutdown_hook(signals=(sigusr1,))

        with pytest.raises(SystemExit):
            signal.getsignal(sigusr1)(sigusr1, None)
        assert manager.state is ConnectionState.empty

    def test_previous_handler_is_chained(self, settings, sigusr1):
        seen = []
        signal.signal(sigusr1, lambda signum, frame: seen.append(signum))
        manager = ConnectionManager(settings)
        manager.acquire()
        manager.install_shutdown_hook(signals=(sigusr1,))

        signal.getsignal(sigusr1)(sigusr1, None)

        assert seen == [sigusr1]
