"""Database helpers shared by the repositories on the checkout path.

Row locks are only useful if waiting for them is bounded, and the errors a
backend raises when a wait gives up differ per vendor.  This module applies a
per-transaction lock-wait timeout and classifies the resulting errors.
"""

from __future__ import annotations

import math

from django.db import DatabaseError, OperationalError
from django.db.backends.base.base import BaseDatabaseWrapper

# PostgreSQL SQLSTATEs: lock_not_available, deadlock_detected,
# serialization_failure.
_PG_LOCK_CONFLICT_CODES = frozenset({"55P03", "40P01", "40001"})
# MySQL: ER_LOCK_WAIT_TIMEOUT, ER_LOCK_DEADLOCK.
_MYSQL_LOCK_CONFLICT_CODES = frozenset({1205, 1213})
_SQLITE_LOCK_MESSAGES = ("database is locked", "database table is locked")


def apply_lock_timeout(connection: BaseDatabaseWrapper, timeout_ms: int) -> None:
    """Bound how long the current transaction waits for a row lock.

    PostgreSQL scopes the setting to the transaction (``SET LOCAL``).  MySQL
    only has a session variable, so the bound outlives the transaction and
    stays on the connection (including a persistent ``CONN_MAX_AGE``
    connection) until the next checkout sets it again; later work on that
    connection waits at most the same time for row locks.  SQLite waits on
    the whole database using the connection's ``timeout`` option, so nothing
    is issued there.
    """
    timeout_ms = int(timeout_ms)
    if timeout_ms <= 0:
        return
    if connection.vendor == "postgresql":
        with connection.cursor() as cursor:
            cursor.execute(f"SET LOCAL lock_timeout = {timeout_ms}")
    elif connection.vendor == "mysql":
        seconds = max(1, math.ceil(timeout_ms / 1000))
        with connection.cursor() as cursor:
            cursor.execute(f"SET SESSION innodb_lock_wait_timeout = {seconds}")


def is_lock_conflict(exc: DatabaseError) -> bool:
    """Return ``True`` when *exc* means "contention, retry later"."""
    cause = exc.__cause__
    sqlstate = getattr(cause, "sqlstate", None) or getattr(cause, "pgcode", None)
    if sqlstate in _PG_LOCK_CONFLICT_CODES:
        return True
    if exc.args and exc.args[0] in _MYSQL_LOCK_CONFLICT_CODES:
        return True
    if isinstance(exc, OperationalError):
        message = str(exc).lower()
        return any(fragment in message for fragment in _SQLITE_LOCK_MESSAGES)
    return False
