"""Tests for dependency construction."""

from __future__ import annotations

from pathlib import Path

import pytest

from sqlgate.core.config import PathsSettings, Settings, StoreSettings
from sqlgate.core.dependencies import GatewayDependencies, build_dependencies
from sqlgate.core.observability import JSONLQueryLogger
from sqlgate.integrations.sqlite_store import SQLiteStore


@pytest.fixture()
def base_settings(tmp_path: Path) -> Settings:
    return Settings(store=StoreSettings(path=str(tmp_path / "data" / "db.sqlite3"), path_env=None))


def test_build_dependencies_opens_sqlite_store(base_settings: Settings, tmp_path: Path) -> None:
    deps = build_dependencies(base_settings)
    try:
        assert isinstance(deps, GatewayDependencies)
        assert isinstance(deps.store, SQLiteStore)
        assert deps.executor.store is deps.store
        assert deps.query_logger is None
        assert (tmp_path / "data").is_dir()
    finally:
        deps.close()


def test_build_dependencies_wires_query_logger(base_settings: Settings, tmp_path: Path) -> None:
    base_settings.paths = PathsSettings(query_logs_dir=str(tmp_path / "logs"))

    deps = build_dependencies(base_settings, db_path=":memory:")
    try:
        assert isinstance(deps.query_logger, JSONLQueryLogger)
        assert (tmp_path / "logs").is_dir()
        gateway = deps.build_gateway(verbose_errors=False)
        assert gateway.query_logger is deps.query_logger
        assert gateway.verbose_errors is False
        assert gateway.executor is deps.executor
    finally:
        deps.close()


def test_db_path_override_wins_over_environment(
    base_settings: Settings, monkeypatch: pytest.MonkeyPatch
) -> None:
    base_settings.store.path_env = "SQLGATE_TEST_DB"
    monkeypatch.setenv("SQLGATE_TEST_DB", "/nonexistent/ignored.sqlite3")

    deps = build_dependencies(base_settings, db_path=":memory:")
    try:
        assert str(deps.store.path) == ":memory:"
    finally:
        deps.close()
