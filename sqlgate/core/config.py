"""Utilities for loading gateway settings from YAML configuration files."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_DB_PATH = "./db.sqlite3"
DEFAULT_DB_PATH_ENV = "SQLGATE_DB_PATH"


@dataclass(slots=True)
class StoreSettings:
    path: str = DEFAULT_DB_PATH
    path_env: str | None = DEFAULT_DB_PATH_ENV

    def resolve_path(self) -> str:
        """Return the database path, preferring the environment override."""

        if self.path_env:
            value = os.getenv(self.path_env)
            if value:
                return value
        if not self.path:
            raise ValueError("Store path must not be empty")
        return self.path


@dataclass(slots=True)
class ServerSettings:
    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass(slots=True)
class PathsSettings:
    query_logs_dir: str | None = None


@dataclass(slots=True)
class Settings:
    store: StoreSettings = field(default_factory=StoreSettings)
    server: ServerSettings = field(default_factory=ServerSettings)
    paths: PathsSettings | None = None
    verbose_errors: bool = True


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def load_settings(path: str | Path) -> Settings:
    """Read configuration from *path* and return structured settings."""

    config_path = Path(path)
    raw = _load_yaml(config_path)
    if not isinstance(raw, dict):
        raise ValueError(f"Configuration file '{config_path}' must contain a mapping")

    store_raw = raw.get("store") or {}
    path_env = store_raw.get("path_env", DEFAULT_DB_PATH_ENV)
    store = StoreSettings(
        path=str(store_raw.get("path", DEFAULT_DB_PATH)),
        path_env=str(path_env) if path_env else None,
    )

    server_raw = raw.get("server") or {}
    origins = server_raw.get("cors_origins", ["*"])
    if isinstance(origins, str):
        origins = [origins]
    server = ServerSettings(
        host=str(server_raw.get("host", "0.0.0.0")),
        port=int(server_raw.get("port", 8080)),
        cors_origins=[str(origin) for origin in origins],
    )

    paths_raw: dict[str, Any] | None = raw.get("paths")
    paths = None
    if paths_raw:
        query_logs_dir = paths_raw.get("query_logs_dir")
        paths = PathsSettings(
            query_logs_dir=str(query_logs_dir) if query_logs_dir else None,
        )

    return Settings(
        store=store,
        server=server,
        paths=paths,
        verbose_errors=bool(raw.get("verbose_errors", True)),
    )
