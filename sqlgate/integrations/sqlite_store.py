"""SQLite-backed store shared across concurrent requests.

A single connection is opened with ``check_same_thread=False`` and guarded by a
lock; every statement runs and is fully fetched while the lock is held. The
connection is in autocommit mode (``isolation_level=None``) so ``BEGIN``,
``COMMIT`` and ``ROLLBACK`` sent by clients are ordinary statements.

``sqlite3`` compiles a statement on its first execution, so there is no
separate prepare round-trip. Compile faults arrive as ``OperationalError``
with the generic ``SQLITE_ERROR`` result code and are reported as
``PrepareError``. Operational faults with any other code (busy, locked,
read-only, I/O, full disk) and every other driver error are
``ExecutionError``.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sqlgate.core.errors import ExecutionError, PrepareError, StoreError
from sqlgate.core.executor import QueryResult

LOGGER = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"


# Out-of-range integers raise OverflowError while binding; older interpreters
# report multi-statement text as sqlite3.Warning, which is not an Error.
_DRIVER_ERRORS = (sqlite3.Error, sqlite3.Warning, OverflowError, ValueError)


def _is_compile_fault(exc: Exception) -> bool:
    if not isinstance(exc, sqlite3.OperationalError):
        return False
    code = getattr(exc, "sqlite_errorcode", None)
    if code is None:
        return True
    # extended result codes carry the primary code in the low byte
    return code & 0xFF == sqlite3.SQLITE_ERROR


def _translate(exc: Exception) -> StoreError:
    message = str(exc) or exc.__class__.__name__
    if _is_compile_fault(exc):
        return PrepareError(message)
    return ExecutionError(message)


@dataclass(frozen=True, slots=True)
class SQLiteExecResult:
    lastrowid: int | None
    rowcount: int

    def last_insert_id(self) -> int | None:
        return self.lastrowid

    def rows_affected(self) -> int | None:
        # -1 means the statement was not DML (e.g. CREATE TABLE)
        if self.rowcount < 0:
            return None
        return self.rowcount


@dataclass(slots=True)
class SQLitePreparedStatement:
    """Statement text bound to the store that will run it."""

    store: SQLiteStore
    statement: str

    def query(self, args: tuple[Any, ...]) -> QueryResult:
        with self.store.cursor() as cursor:
            try:
                cursor.execute(self.statement, args)
                columns = [column[0] for column in cursor.description or ()]
                rows = cursor.fetchall()
            except _DRIVER_ERRORS as exc:
                raise _translate(exc) from exc
        return QueryResult(columns=columns, rows=rows)

    def exec(self, args: tuple[Any, ...]) -> SQLiteExecResult:
        with self.store.cursor() as cursor:
            try:
                cursor.execute(self.statement, args)
            except _DRIVER_ERRORS as exc:
                raise _translate(exc) from exc
            return SQLiteExecResult(lastrowid=cursor.lastrowid, rowcount=cursor.rowcount)


@dataclass(slots=True)
class SQLiteStore:
    """Thread-safe handle over one SQLite database file."""

    path: str | Path = MEMORY_PATH
    _connection: sqlite3.Connection | None = field(init=False, default=None)
    _lock: threading.Lock = field(init=False, default_factory=threading.Lock)

    def __post_init__(self) -> None:
        target = str(self.path)
        if target != MEMORY_PATH:
            parent = Path(target).expanduser().parent
            parent.mkdir(parents=True, exist_ok=True)
            target = str(Path(target).expanduser())
        LOGGER.info("Opening SQLite store at '%s'", target)
        self._connection = sqlite3.connect(
            target,
            check_same_thread=False,
            isolation_level=None,
        )

    @property
    def connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise ExecutionError("store is closed")
        return self._connection

    @contextmanager
    def cursor(self) -> Iterator[sqlite3.Cursor]:
        with self._lock:
            cursor = self.connection.cursor()
            try:
                yield cursor
            finally:
                cursor.close()

    def prepare(self, statement: str) -> SQLitePreparedStatement:
        if not statement:
            raise PrepareError("empty statement")
        if self._connection is None:
            raise PrepareError("store is closed")
        return SQLitePreparedStatement(store=self, statement=statement)

    def close(self) -> None:
        with self._lock:
            if self._connection is not None:
                LOGGER.info("Closing SQLite store at '%s'", self.path)
                self._connection.close()
                self._connection = None
