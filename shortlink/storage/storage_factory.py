"""
Storage factory – switch storage backend from config (lazy env version)
======================================================================

This module centralizes selection of the storage backend (memory, SQLite or
PostgreSQL) so the rest of the app can stay ignorant of where data lives.

- Reads environment **at call time** to avoid stale values in tests.
- Imports the PostgreSQL backend **only if** the selected backend is "postgres".

Environment variables
---------------------
- SHORTLINK_STORAGE_BACKEND: "memory" (default), "sqlite" or "postgres"
- SHORTLINK_SQLITE_PATH:     file path if backend=="sqlite"
- SHORTLINK_DB_DSN:          DSN string if backend=="postgres"
"""

import logging
import os
from typing import Optional

from shortlink.config import DEFAULT_SQLITE_PATH, settings
from shortlink.storage.base import BaseStorage
from shortlink.storage.storage import Storage

log = logging.getLogger(__name__)


def get_storage(backend: Optional[str] = None, **kwargs) -> BaseStorage:
    """
    Return a BaseStorage implementation based on configuration.

    Parameters
    ----------
    backend : str, optional
        "memory", "sqlite" or "postgres". If omitted, reads SHORTLINK_STORAGE_BACKEND.
    kwargs : dict
        Extra args passed to the backend constructor. For sqlite use path="...",
        for postgres use dsn="..." (plus optional min_size/max_size/timeout).

    Raises
    ------
    ValueError
        Unknown backend name, or postgres selected without a DSN.
    """
    # Read env **now** to avoid capturing stale values at import time
    be = (backend or os.getenv("SHORTLINK_STORAGE_BACKEND", "memory")).strip().lower()
    log.info("Selected storage backend: %r", be)

    if be == "memory":
        return Storage()

    if be == "sqlite":
        from shortlink.storage.sqlite_storage import SQLiteStorage

        path = kwargs.get("path") or os.getenv("SHORTLINK_SQLITE_PATH", DEFAULT_SQLITE_PATH)
        timeout = kwargs.get("timeout", settings.SQLITE_TIMEOUT)
        return SQLiteStorage(path=path, timeout=timeout)

    if be == "postgres":
        dsn = kwargs.get("dsn") or os.getenv("SHORTLINK_DB_DSN", "")
        if not dsn:
            raise ValueError("DB_DSN is required for postgres backend (env SHORTLINK_DB_DSN)")
        # Local import to avoid hard dependency when not using postgres
        from shortlink.storage.db_storage import DBStorage

        return DBStorage(
            dsn=dsn,
            min_size=kwargs.get("min_size", settings.DB_POOL_MIN_SIZE),
            max_size=kwargs.get("max_size", settings.DB_POOL_MAX_SIZE),
            timeout=kwargs.get("timeout", settings.DB_TIMEOUT),
        )

    raise ValueError(f"Unknown storage backend: {be!r}")
