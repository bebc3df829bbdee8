"""Named job locks used to keep scheduled jobs single-instance.

`MySQLJobLock` relies on MySQL's GET_LOCK: the lock belongs to the session
that took it, so the connection is held open until release. Every app
instance pointing at the same database shares the lock namespace, which
gives both "one server" and "no overlap" for a job.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Protocol

from ..core.exceptions import LockNotAcquiredError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


class JobLock(Protocol):
    def acquire(self) -> bool:
        raise NotImplementedError

    def release(self) -> None:
        raise NotImplementedError


@contextmanager
def held(lock: JobLock) -> Iterator[None]:
    """Hold `lock` for the block or raise LockNotAcquiredError."""
    if not lock.acquire():
        raise LockNotAcquiredError("job lock is held by another run")
    try:
        yield
    finally:
        lock.release()


class MySQLJobLock:
    def __init__(self, conn_factory: DatabaseConnection, name: str, *, timeout_seconds: int = 0):
        self._conn_factory = conn_factory
        self._name = name
        self._timeout = int(timeout_seconds)
        self._conn = None

    @property
    def name(self) -> str:
        return self._name

    def acquire(self) -> bool:
        if self._conn is not None:
            # Re-entrant acquisition would silently stack MySQL lock counts.
            return False

        conn = self._conn_factory.connect()
        cur = conn.cursor()
        try:
            cur.execute("SELECT GET_LOCK(%s, %s)", (self._name, self._timeout))
            row = cur.fetchone()
        finally:
            cur.close()

        if not row or row[0] != 1:
            conn.close()
            logger.warning("Lock %s is held elsewhere", self._name)
            return False

        self._conn = conn
        logger.debug("Acquired lock %s", self._name)
        return True

    def release(self) -> None:
        conn, self._conn = self._conn, None
        if conn is None:
            return
        try:
            cur = conn.cursor()
            try:
                cur.execute("SELECT RELEASE_LOCK(%s)", (self._name,))
                cur.fetchone()
            finally:
                cur.close()
        finally:
            # Closing the session releases the lock even if RELEASE_LOCK failed.
            conn.close()
        logger.debug("Released lock %s", self._name)


class InProcessJobLock:
    """Single-process lock for tests and single-instance deployments."""

    def __init__(self, name: str = "job"):
        self.name = name
        self._lock = threading.Lock()

    def acquire(self) -> bool:
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        if self._lock.locked():
            self._lock.release()
