"""
SQLiteStorage – file-backed storage for shortlink
================================================

Durable single-node backend built on the standard library `sqlite3` module.
It implements the same `BaseStorage` contract as the in-memory and
PostgreSQL backends, so the mapping service never knows which one it talks to.

Key Design Points
-----------------
- **Uniqueness**: `alias TEXT NOT NULL UNIQUE`. A duplicate insert is detected
  from SQLite's own constraint error, never by looking the alias up first.
- **Connections**: one short-lived connection per call. sqlite3 connections are
  bound to the thread that created them, so per-call connections make a single
  `SQLiteStorage` safe to share across request threads.
- **Timeouts**: `timeout` is how long a writer waits on a locked database
  before the call fails with `StoreUnavailableError`.
- **Journal**: WAL mode so readers do not block on a concurrent writer.

Schema
------
    CREATE TABLE IF NOT EXISTS url(
        id INTEGER PRIMARY KEY,
        alias TEXT NOT NULL UNIQUE,
        url TEXT NOT NULL);
    CREATE INDEX IF NOT EXISTS idx_alias ON url(alias);

Example
-------
>>> storage = SQLiteStorage("./storage/storage.db")
>>> storage.insert("ex1", "https://example.com")
1
>>> storage.get("ex1")
'https://example.com'
"""

import contextlib
import logging
import os
import sqlite3

from ..errors import DuplicateAliasError, NotFoundError, StoreUnavailableError
from .base import BaseStorage

log = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS url(
    id INTEGER PRIMARY KEY,
    alias TEXT NOT NULL UNIQUE,
    url TEXT NOT NULL);
CREATE INDEX IF NOT EXISTS idx_alias ON url(alias);
"""


def _is_unique_violation(exc: sqlite3.IntegrityError) -> bool:
    code = getattr(exc, "sqlite_errorcode", None)
    if code is not None:
        return code == sqlite3.SQLITE_CONSTRAINT_UNIQUE
    return "UNIQUE constraint failed" in str(exc)


class SQLiteStorage(BaseStorage):
    """SQLite implementation of the shortlink storage contract.

    Parameters
    ----------
    path : str
        Database file. Its parent directory is created when missing.
    timeout : float
        Seconds to wait on a locked database.
    """

    def __init__(self, path: str, timeout: float = 5.0) -> None:
        if not path or path == ":memory:":
            raise ValueError("SQLiteStorage needs a file path; use the memory backend instead")
        self.path = path
        self.timeout = timeout

        op = "storage.sqlite.init"
        directory = os.path.dirname(path)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            with self._conn() as con:
                con.execute("PRAGMA journal_mode=WAL")
                con.executescript(_SCHEMA)
        except (OSError, sqlite3.Error) as exc:
            raise StoreUnavailableError(f"{op}: {exc}") from exc
        log.debug("SQLite storage ready at %s", path)

    # ---- Internal helpers -------------------------------------------------

    @contextlib.contextmanager
    def _conn(self):
        """Open a connection, commit on success, roll back on error, always close."""
        con = sqlite3.connect(self.path, timeout=self.timeout)
        try:
            with con:
                yield con
        finally:
            con.close()

    # ---- Contract methods -------------------------------------------------

    def insert(self, alias: str, url: str) -> int:
        op = "storage.sqlite.insert"
        try:
            with self._conn() as con:
                cur = con.execute("INSERT INTO url(alias, url) VALUES(?, ?)", (alias, url))
                return cur.lastrowid
        except sqlite3.IntegrityError as exc:
            if _is_unique_violation(exc):
                raise DuplicateAliasError(alias) from exc
            raise StoreUnavailableError(f"{op}: {exc}") from exc
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"{op}: {exc}") from exc

    def get(self, alias: str) -> str:
        op = "storage.sqlite.get"
        try:
            with self._conn() as con:
                row = con.execute("SELECT url FROM url WHERE alias = ?", (alias,)).fetchone()
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"{op}: {exc}") from exc
        if row is None:
            raise NotFoundError(alias)
        return row[0]

    def delete(self, alias: str) -> None:
        op = "storage.sqlite.delete"
        try:
            with self._conn() as con:
                cur = con.execute("DELETE FROM url WHERE alias = ?", (alias,))
                affected = cur.rowcount
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"{op}: {exc}") from exc
        if affected == 0:
            raise NotFoundError(alias)

    def exists(self, alias: str) -> bool:
        op = "storage.sqlite.exists"
        try:
            with self._conn() as con:
                row = con.execute(
                    "SELECT EXISTS(SELECT 1 FROM url WHERE alias = ?)", (alias,)
                ).fetchone()
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"{op}: {exc}") from exc
        return bool(row[0]) if row else False
