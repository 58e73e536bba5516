"""Statement execution against an injected store handle.

The executor owns the read/write split: read statements yield a buffered
``RowSet``, write statements a mutation summary. Store adapters live under
``sqlgate.integrations`` and satisfy the protocols declared here.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from sqlgate.core.classifier import Category
from sqlgate.core.codec import Scalar, decode_row, encode_args
from sqlgate.core.errors import ClassificationRejected

LOGGER = logging.getLogger(__name__)

RowSet = list[dict[str, Scalar]]


@dataclass(slots=True)
class QueryResult:
    """Column names plus the raw rows produced by a read statement."""

    columns: list[str]
    rows: list[Sequence[Any]] = field(default_factory=list)


class ExecResult(Protocol):
    """Metadata reported by the store after a write statement."""

    def last_insert_id(self) -> int | None:  # pragma: no cover - interface
        """Return the generated row id or raise ``NotImplementedError``."""

    def rows_affected(self) -> int | None:  # pragma: no cover - interface
        """Return the affected-row count or raise ``NotImplementedError``."""


class PreparedStatement(Protocol):
    """A statement accepted by the store, ready for positional binding."""

    def query(self, args: tuple[Any, ...]) -> QueryResult:  # pragma: no cover - interface
        ...

    def exec(self, args: tuple[Any, ...]) -> ExecResult:  # pragma: no cover - interface
        ...


class SQLStore(Protocol):
    """Relational backend shared by concurrent requests."""

    def prepare(self, statement: str) -> PreparedStatement:  # pragma: no cover - interface
        """Compile *statement* or raise ``PrepareError``."""

    def close(self) -> None:  # pragma: no cover - interface
        ...


@dataclass(frozen=True, slots=True)
class ReadOutcome:
    rows: RowSet


@dataclass(frozen=True, slots=True)
class WriteOutcome:
    last_insert_id: int
    rows_affected: int


ExecutionOutcome = ReadOutcome | WriteOutcome


@dataclass(slots=True)
class QueryExecutor:
    """Runs classified statements with positional arguments."""

    store: SQLStore

    def execute(
        self, statement: str, args: Sequence[Any] | None, category: Category
    ) -> ExecutionOutcome:
        if category is Category.REJECTED:
            raise ClassificationRejected()

        prepared = self.store.prepare(statement)
        bound = encode_args(args)

        if category is Category.READ:
            return self._run_read(prepared, bound)
        return self._run_write(prepared, bound)

    def _run_read(self, prepared: PreparedStatement, args: tuple[Any, ...]) -> ReadOutcome:
        result = prepared.query(args)
        columns = list(result.columns)
        rows = [decode_row(columns, values) for values in result.rows]
        LOGGER.debug("Read statement returned %s row(s)", len(rows))
        return ReadOutcome(rows=rows)

    def _run_write(self, prepared: PreparedStatement, args: tuple[Any, ...]) -> WriteOutcome:
        result = prepared.exec(args)
        last_insert_id = _optional_metric(result.last_insert_id)
        rows_affected = _optional_metric(result.rows_affected)
        LOGGER.debug(
            "Write statement finished last_insert_id=%s rows_affected=%s",
            last_insert_id,
            rows_affected,
        )
        return WriteOutcome(last_insert_id=last_insert_id, rows_affected=rows_affected)


def _optional_metric(getter: Callable[[], int | None]) -> int:
    try:
        value = getter()
    except NotImplementedError:
        return 0
    if value is None or value < 0:
        return 0
    return int(value)


__all__ = [
    "ExecResult",
    "ExecutionOutcome",
    "PreparedStatement",
    "QueryExecutor",
    "QueryResult",
    "ReadOutcome",
    "RowSet",
    "SQLStore",
    "WriteOutcome",
]
