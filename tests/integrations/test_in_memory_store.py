"""Unit tests for the canned in-memory store."""

from __future__ import annotations

import pytest

from sqlgate.core.errors import ExecutionError, PrepareError
from sqlgate.integrations.in_memory_store import InMemorySQLStore


def test_query_returns_canned_rows() -> None:
    store = InMemorySQLStore()
    store.prime("SELECT * FROM accounts WHERE id = ?", ["id", "name"], [["123", "Acme"]])

    result = store.prepare("SELECT * FROM accounts WHERE id = ?").query(("123",))

    assert result.columns == ["id", "name"]
    assert result.rows == [["123", "Acme"]]
    assert store.executed == [("SELECT * FROM accounts WHERE id = ?", ("123",))]


def test_unprimed_statement_fails_to_prepare() -> None:
    store = InMemorySQLStore()

    with pytest.raises(PrepareError):
        store.prepare("SELECT * FROM opportunities")


def test_placeholder_count_is_enforced() -> None:
    store = InMemorySQLStore()
    store.prime_exec("DELETE FROM leads WHERE id = ?", rows_affected=1)

    with pytest.raises(ExecutionError):
        store.prepare("DELETE FROM leads WHERE id = ?").exec(())


def test_exec_reports_no_last_insert_id() -> None:
    store = InMemorySQLStore()
    store.prime_exec("DELETE FROM leads", rows_affected=4)

    result = store.prepare("DELETE FROM leads").exec(())

    assert result.rows_affected() == 4
    with pytest.raises(NotImplementedError):
        result.last_insert_id()


def test_closed_store_refuses_statements() -> None:
    store = InMemorySQLStore()
    store.prime_exec("DELETE FROM leads")
    store.close()

    with pytest.raises(PrepareError):
        store.prepare("DELETE FROM leads")
