"""Factory helpers for constructing gateway dependencies from settings."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from sqlgate.core.config import Settings
from sqlgate.core.executor import QueryExecutor, SQLStore
from sqlgate.core.gateway import SQLGateway
from sqlgate.core.observability import JSONLQueryLogger, QueryObservationSink
from sqlgate.integrations.sqlite_store import SQLiteStore


@dataclass(slots=True)
class GatewayDependencies:
    """Objects owned by the composition root for the life of the process."""

    store: SQLStore
    executor: QueryExecutor
    query_logger: QueryObservationSink | None = None

    def build_gateway(self, *, verbose_errors: bool = True) -> SQLGateway:
        return SQLGateway(
            executor=self.executor,
            query_logger=self.query_logger,
            verbose_errors=verbose_errors,
        )

    def close(self) -> None:
        self.store.close()


def build_dependencies(settings: Settings, *, db_path: str | None = None) -> GatewayDependencies:
    """Create dependency instances based on *settings*.

    *db_path* overrides the configured store location.
    """

    store = SQLiteStore(path=db_path or settings.store.resolve_path())
    executor = QueryExecutor(store=store)
    query_logs_dir = _resolve_query_logs_dir(settings)
    query_logger = JSONLQueryLogger(base_dir=query_logs_dir) if query_logs_dir else None
    return GatewayDependencies(store=store, executor=executor, query_logger=query_logger)


def _resolve_query_logs_dir(settings: Settings) -> Path | None:
    if settings.paths is None or not settings.paths.query_logs_dir:
        return None
    path = Path(settings.paths.query_logs_dir).expanduser()
    path.mkdir(parents=True, exist_ok=True)
    return path
