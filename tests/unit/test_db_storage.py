import contextlib
import threading
import time

import psycopg
import psycopg.errors
import pytest

from shortlink.errors import DuplicateAliasError, NotFoundError, StoreUnavailableError
from shortlink.storage.db_storage import DBStorage


class DummyCursor:
    def __init__(self, results=None, rowcount=1, error=None):
        # results is a list of tuples handed out by fetchone()
        self._results = list(results or [])
        self.rowcount = rowcount
        self.error = error
        self.executed = []

    def execute(self, query, params=None):
        self.executed.append((" ".join(query.split()), params))
        # DDL runs without params; only fail the statement under test.
        if self.error is not None and params is not None:
            raise self.error

    def fetchone(self):
        return self._results.pop(0) if self._results else None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class DummyConnection:
    def __init__(self, cursor):
        self._cursor = cursor

    def cursor(self):
        return self._cursor

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class DummyPool:
    def __init__(self, cursor):
        self.conn = DummyConnection(cursor)
        self.closed = False

    @contextlib.contextmanager
    def connection(self):
        yield self.conn

    def close(self):
        self.closed = True


def make_storage(**cursor_kwargs):
    cursor = DummyCursor(**cursor_kwargs)
    pool = DummyPool(cursor)
    return DBStorage("fake", pool=pool), cursor, pool


def statements(cursor):
    return [q for q, _ in cursor.executed]


# ---------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------

def test_schema_created_once_on_first_use():
    storage, cursor, _ = make_storage(results=[(True,), (False,)])
    storage.exists("a")
    storage.exists("b")
    ddl = [q for q in statements(cursor) if q.startswith("CREATE")]
    assert len(ddl) == 2
    assert any("alias TEXT NOT NULL UNIQUE" in q for q in ddl)
    assert any("idx_alias ON url(alias)" in q for q in ddl)


def test_insert_returns_id():
    storage, cursor, _ = make_storage(results=[(42,)])
    assert storage.insert("abc", "https://x.com") == 42
    query, params = cursor.executed[-1]
    assert query.startswith("INSERT INTO url (alias, url)")
    assert params == ("abc", "https://x.com")


def test_insert_unique_violation_is_duplicate():
    storage, _, _ = make_storage(error=psycopg.errors.UniqueViolation("duplicate key value"))
    with pytest.raises(DuplicateAliasError) as info:
        storage.insert("abc", "https://x.com")
    assert info.value.alias == "abc"


def test_insert_without_returned_row_is_store_unavailable():
    storage, _, _ = make_storage(results=[])
    with pytest.raises(StoreUnavailableError):
        storage.insert("abc", "https://x.com")


def test_get():
    storage, _, _ = make_storage(results=[("https://x.com",)])
    assert storage.get("abc") == "https://x.com"


def test_get_missing_raises_not_found():
    storage, _, _ = make_storage(results=[])
    with pytest.raises(NotFoundError):
        storage.get("abc")


def test_delete():
    storage, cursor, _ = make_storage(rowcount=1)
    storage.delete("abc")
    assert cursor.executed[-1] == ("DELETE FROM url WHERE alias = %s", ("abc",))


def test_delete_zero_rows_raises_not_found():
    storage, _, _ = make_storage(rowcount=0)
    with pytest.raises(NotFoundError):
        storage.delete("abc")


def test_exists():
    storage, _, _ = make_storage(results=[(True,), (False,)])
    assert storage.exists("alias1") is True
    assert storage.exists("alias1") is False


@pytest.mark.parametrize(
    "call",
    [
        lambda s: s.insert("abc", "https://x.com"),
        lambda s: s.get("abc"),
        lambda s: s.delete("abc"),
        lambda s: s.exists("abc"),
    ],
)
def test_driver_errors_are_store_unavailable(call):
    storage, _, _ = make_storage(error=psycopg.OperationalError("server closed the connection"))
    with pytest.raises(StoreUnavailableError) as info:
        call(storage)
    assert isinstance(info.value.__cause__, psycopg.OperationalError)


def test_pool_opened_lazily_and_closed(monkeypatch):
    created = []

    def fake_pool(**kwargs):
        pool = DummyPool(DummyCursor(results=[(False,)]))
        created.append((kwargs, pool))
        return pool

    monkeypatch.setattr("shortlink.storage.db_storage.ConnectionPool", fake_pool)
    storage = DBStorage("postgresql://u:p@db:5432/x", min_size=2, max_size=4, timeout=1.5)
    assert created == []  # nothing opened at construction

    assert storage.exists("abc") is False
    assert len(created) == 1
    kwargs, pool = created[0]
    assert kwargs["conninfo"] == "postgresql://u:p@db:5432/x"
    assert (kwargs["min_size"], kwargs["max_size"], kwargs["timeout"]) == (2, 4, 1.5)

    storage.close()
    assert pool.closed is True


def test_close_leaves_injected_pool_open():
    storage, _, pool = make_storage()
    storage.close()
    assert pool.closed is False


class SlowFailingPool:
    """Every connection attempt stalls, then fails like an unreachable server."""

    def __init__(self, delay):
        self.delay = delay

    @contextlib.contextmanager
    def connection(self):
        time.sleep(self.delay)
        raise psycopg.OperationalError("connection refused")
        yield  # pragma: no cover

    def close(self):
        pass


def test_failed_schema_setup_does_not_serialize_callers():
    delay = 0.3
    storage = DBStorage("fake", pool=SlowFailingPool(delay), timeout=5.0)
    workers = 4
    barrier = threading.Barrier(workers)
    durations, errors = [], []

    def call():
        barrier.wait()
        start = time.perf_counter()
        try:
            storage.get("abc")
        except StoreUnavailableError as exc:
            errors.append(exc)
        durations.append(time.perf_counter() - start)

    threads = [threading.Thread(target=call) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(errors) == workers
    # Serialized setup would make the last caller wait workers * delay.
    assert max(durations) < delay * 2


def test_schema_setup_retried_after_failure():
    storage, cursor, pool = make_storage(results=[(True,)])
    real_connection = pool.connection
    attempts = []

    @contextlib.contextmanager
    def flaky_connection():
        attempts.append(1)
        if len(attempts) == 1:
            raise psycopg.OperationalError("connection refused")
        with real_connection() as con:
            yield con

    pool.connection = flaky_connection
    with pytest.raises(StoreUnavailableError):
        storage.exists("abc")
    assert storage.exists("abc") is True
    assert any(q.startswith("CREATE TABLE") for q in statements(cursor))
