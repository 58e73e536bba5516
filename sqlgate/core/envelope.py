"""Response envelope shared by every gateway reply.

Assembly is a pure mapping from an execution outcome or an error to an
immutable envelope. Rendering to JSON happens in ``ResponseEnvelope.to_dict``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlgate.core.codec import to_transport
from sqlgate.core.errors import GatewayError, PrepareError, StoreError
from sqlgate.core.executor import ExecutionOutcome, ReadOutcome, WriteOutcome

QUERY_SELECT = "select"
QUERY_EXEC = "exec"

_GENERIC_STORE_MESSAGES = {
    PrepareError.kind: "statement could not be prepared",
    StoreError.kind: "statement failed",
}


@dataclass(frozen=True, slots=True)
class ErrorDescriptor:
    message: str
    code: int


@dataclass(frozen=True, slots=True)
class ResponseEnvelope:
    """Either a payload or an error, never both."""

    data: dict[str, Any] | None = None
    error: ErrorDescriptor | None = None

    def __post_init__(self) -> None:
        if self.data is not None and self.error is not None:
            raise ValueError("Envelope cannot carry both data and error")

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status_code(self) -> int:
        return self.error.code if self.error is not None else 200

    def to_dict(self) -> dict[str, Any]:
        rendered: dict[str, Any] = {}
        if self.data is not None:
            rendered["data"] = _render_payload(self.data)
        if self.error is not None:
            rendered["error"] = {"message": self.error.message, "code": self.error.code}
        rendered["ok"] = self.ok
        return rendered


def build_envelope(outcome: ExecutionOutcome) -> ResponseEnvelope:
    if isinstance(outcome, ReadOutcome):
        return ResponseEnvelope(data={"query_type": QUERY_SELECT, "data": outcome.rows})
    if isinstance(outcome, WriteOutcome):
        return ResponseEnvelope(
            data={
                "query_type": QUERY_EXEC,
                "last_insert_id": outcome.last_insert_id,
                "rows_affected": outcome.rows_affected,
            }
        )
    raise TypeError(f"Unknown execution outcome: {outcome!r}")


def build_error_envelope(error: GatewayError, *, verbose: bool = True) -> ResponseEnvelope:
    """Wrap *error*; with ``verbose=False`` store messages are replaced."""

    message = error.message
    if not verbose and isinstance(error, StoreError):
        message = _GENERIC_STORE_MESSAGES.get(error.kind, _GENERIC_STORE_MESSAGES[StoreError.kind])
    if not message:
        message = error.__class__.__name__
    return ResponseEnvelope(error=ErrorDescriptor(message=message, code=error.status_code))


def build_liveness_envelope() -> ResponseEnvelope:
    return ResponseEnvelope()


def _render_payload(payload: dict[str, Any]) -> dict[str, Any]:
    rows = payload.get("data")
    if payload.get("query_type") != QUERY_SELECT or not isinstance(rows, list):
        return dict(payload)
    rendered = dict(payload)
    rendered["data"] = [
        {column: to_transport(value) for column, value in row.items()} for row in rows
    ]
    return rendered


__all__ = [
    "ErrorDescriptor",
    "QUERY_EXEC",
    "QUERY_SELECT",
    "ResponseEnvelope",
    "build_envelope",
    "build_error_envelope",
    "build_liveness_envelope",
]
