"""Tests for the statement executor."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from sqlgate.core.classifier import Category
from sqlgate.core.errors import ClassificationRejected, ExecutionError, PrepareError
from sqlgate.core.executor import QueryExecutor, ReadOutcome, WriteOutcome
from sqlgate.integrations.in_memory_store import InMemorySQLStore
from sqlgate.integrations.sqlite_store import SQLiteStore


@pytest.fixture()
def sqlite_store() -> Iterator[SQLiteStore]:
    store = SQLiteStore()
    yield store
    store.close()


def test_rejected_statement_never_reaches_the_store() -> None:
    store = InMemorySQLStore()
    executor = QueryExecutor(store=store)

    with pytest.raises(ClassificationRejected) as excinfo:
        executor.execute("PRAGMA user_version", [], Category.REJECTED)

    assert excinfo.value.message == "Invalid SQL"
    assert store.prepared == []
    assert store.executed == []


def test_read_materialises_each_row() -> None:
    store = InMemorySQLStore()
    store.prime("SELECT id, name FROM users WHERE id > ?", ["id", "name"], [[1, "a"], [2, None]])
    executor = QueryExecutor(store=store)

    outcome = executor.execute("SELECT id, name FROM users WHERE id > ?", [0], Category.READ)

    assert isinstance(outcome, ReadOutcome)
    assert outcome.rows == [{"id": 1, "name": "a"}, {"id": 2, "name": None}]
    assert store.executed == [("SELECT id, name FROM users WHERE id > ?", (0,))]


def test_read_with_no_rows_returns_empty_list(sqlite_store: SQLiteStore) -> None:
    executor = QueryExecutor(store=sqlite_store)
    executor.execute("CREATE TABLE t (v TEXT)", [], Category.WRITE)

    outcome = executor.execute("SELECT v FROM t", [], Category.READ)

    assert outcome == ReadOutcome(rows=[])


def test_write_without_last_insert_id_support_reports_zero() -> None:
    store = InMemorySQLStore()
    store.prime_exec("UPDATE users SET name = ? WHERE id = ?", rows_affected=3)
    executor = QueryExecutor(store=store)

    outcome = executor.execute("UPDATE users SET name = ? WHERE id = ?", ["b", 1], Category.WRITE)

    assert outcome == WriteOutcome(last_insert_id=0, rows_affected=3)


def test_write_without_any_metadata_reports_zeros() -> None:
    store = InMemorySQLStore()
    store.prime_exec("DELETE FROM users")
    executor = QueryExecutor(store=store)

    outcome = executor.execute("DELETE FROM users", None, Category.WRITE)

    assert outcome == WriteOutcome(last_insert_id=0, rows_affected=0)


def test_ddl_on_sqlite_reports_zero_metadata(sqlite_store: SQLiteStore) -> None:
    executor = QueryExecutor(store=sqlite_store)

    outcome = executor.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, v TEXT)", [], Category.WRITE)

    assert outcome == WriteOutcome(last_insert_id=0, rows_affected=0)


def test_insert_then_select_round_trip(sqlite_store: SQLiteStore) -> None:
    executor = QueryExecutor(store=sqlite_store)
    executor.execute("CREATE TABLE t (v TEXT)", [], Category.WRITE)

    inserted = executor.execute("INSERT INTO t(v) VALUES(?)", ["x"], Category.WRITE)
    selected = executor.execute("SELECT v FROM t", [], Category.READ)

    assert inserted == WriteOutcome(last_insert_id=1, rows_affected=1)
    assert selected == ReadOutcome(rows=[{"v": "x"}])


def test_rows_keep_store_order(sqlite_store: SQLiteStore) -> None:
    executor = QueryExecutor(store=sqlite_store)
    executor.execute("CREATE TABLE t (n INTEGER)", [], Category.WRITE)
    for value in (3, 1, 2):
        executor.execute("INSERT INTO t(n) VALUES(?)", [value], Category.WRITE)

    outcome = executor.execute("SELECT n FROM t ORDER BY rowid", [], Category.READ)

    assert [row["n"] for row in outcome.rows] == [3, 1, 2]


def test_prepare_failure_short_circuits_before_binding() -> None:
    store = InMemorySQLStore()
    executor = QueryExecutor(store=store)

    with pytest.raises(PrepareError):
        executor.execute("SELECT * FROM missing", [1, 2, 3], Category.READ)

    assert store.prepared == ["SELECT * FROM missing"]
    assert store.executed == []


@pytest.mark.parametrize("args", [[], [1, 2]])
def test_argument_count_mismatch_is_execution_error(
    sqlite_store: SQLiteStore, args: list[int]
) -> None:
    executor = QueryExecutor(store=sqlite_store)

    with pytest.raises(ExecutionError) as excinfo:
        executor.execute("SELECT ?", args, Category.READ)

    assert excinfo.value.message


def test_unknown_table_is_prepare_error(sqlite_store: SQLiteStore) -> None:
    executor = QueryExecutor(store=sqlite_store)

    with pytest.raises(PrepareError) as excinfo:
        executor.execute("DROP TABLE nonexistent", [], Category.WRITE)

    assert "nonexistent" in excinfo.value.message
