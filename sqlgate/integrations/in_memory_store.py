"""Lightweight, in-memory store stub for tests and prototypes.

This store does not parse SQL or touch a database. It returns canned results
keyed by statement text and, like some real backends, cannot report a
last-insert id. Statements that were never primed fail to prepare; the number
of ``?`` placeholders is checked against the bound arguments.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sqlgate.core.errors import ExecutionError, PrepareError
from sqlgate.core.executor import QueryResult


@dataclass(frozen=True, slots=True)
class CannedExecResult:
    affected: int | None = None

    def last_insert_id(self) -> int | None:
        raise NotImplementedError("last insert id is not supported by the in-memory store")

    def rows_affected(self) -> int | None:
        if self.affected is None:
            raise NotImplementedError("rows affected was not primed")
        return self.affected


@dataclass(slots=True)
class CannedStatement:
    statement: str
    result: QueryResult | CannedExecResult
    executed: list[tuple[str, tuple[Any, ...]]]

    def _bind(self, args: tuple[Any, ...]) -> None:
        expected = self.statement.count("?")
        if len(args) != expected:
            raise ExecutionError(f"expected {expected} argument(s), got {len(args)}")
        self.executed.append((self.statement, args))

    def query(self, args: tuple[Any, ...]) -> QueryResult:
        self._bind(args)
        if not isinstance(self.result, QueryResult):
            raise ExecutionError("statement does not return rows")
        return QueryResult(columns=list(self.result.columns), rows=list(self.result.rows))

    def exec(self, args: tuple[Any, ...]) -> CannedExecResult:
        self._bind(args)
        if isinstance(self.result, QueryResult):
            return CannedExecResult(affected=0)
        return self.result


@dataclass(slots=True)
class InMemorySQLStore:
    """Mapping-based store that satisfies the ``SQLStore`` protocol."""

    canned_results: dict[str, QueryResult | CannedExecResult] = field(default_factory=dict)
    prepared: list[str] = field(default_factory=list)
    executed: list[tuple[str, tuple[Any, ...]]] = field(default_factory=list)
    closed: bool = False

    def prepare(self, statement: str) -> CannedStatement:
        if self.closed:
            raise PrepareError("store is closed")
        self.prepared.append(statement)
        result = self.canned_results.get(statement)
        if result is None:
            raise PrepareError(f"no canned result for statement: {statement}")
        return CannedStatement(statement=statement, result=result, executed=self.executed)

    def prime(self, statement: str, columns: list[str], rows: list[list[Any]]) -> None:
        """Register canned rows for a future read of *statement*."""

        self.canned_results[statement] = QueryResult(columns=list(columns), rows=list(rows))

    def prime_exec(self, statement: str, rows_affected: int | None = None) -> None:
        """Register a canned mutation summary for *statement*."""

        self.canned_results[statement] = CannedExecResult(affected=rows_affected)

    def close(self) -> None:
        self.closed = True
