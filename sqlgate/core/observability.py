"""JSONL-backed observability helpers for gateway requests."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol


class QueryObservationSink(Protocol):
    """Records lifecycle events emitted while serving a statement."""

    def log_event(self, request_id: str, event: str, payload: dict[str, Any]) -> None:  # pragma: no cover - interface
        ...


def _utc_timestamp(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(slots=True)
class JSONLQueryLogger(QueryObservationSink):
    """Appends request events to one JSONL file under *base_dir*.

    The file is named after the moment the logger was created, e.g.
    ``20240501T123045123-queries.jsonl``, so each process writes its own file.
    """

    base_dir: Path
    path: Path = field(init=False)
    _lock: threading.Lock = field(init=False, default_factory=threading.Lock)

    def __post_init__(self) -> None:
        directory = Path(self.base_dir).expanduser()
        directory.mkdir(parents=True, exist_ok=True)
        started = datetime.now(UTC).strftime("%Y%m%dT%H%M%S%f")[:-3]
        self.path = directory / f"{started}-queries.jsonl"

    def log_event(self, request_id: str, event: str, payload: dict[str, Any]) -> None:  # type: ignore[override]
        record = {key: value for key, value in payload.items() if value is not None}
        record.setdefault("event", event)
        record.setdefault("request_id", request_id)
        record.setdefault("timestamp", _utc_timestamp(datetime.now(UTC)))
        line = json.dumps(record, ensure_ascii=False)
        with self._lock:
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(line)
                handle.write("\n")
