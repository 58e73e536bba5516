"""Request handling for the SQL gateway.

``SQLGateway`` decodes a request body, classifies the statement, runs it
through the executor and hands back a response envelope. Every
``GatewayError`` raised along the way ends the request with an error envelope;
anything else propagates to the transport.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, ValidationError

from sqlgate.core.classifier import Category, classify
from sqlgate.core.envelope import ResponseEnvelope, build_envelope, build_error_envelope
from sqlgate.core.errors import DecodeError, GatewayError
from sqlgate.core.executor import ExecutionOutcome, QueryExecutor, ReadOutcome
from sqlgate.core.observability import QueryObservationSink

LOGGER = logging.getLogger(__name__)


def _truncate_for_log(value: str, limit: int = 200) -> str:
    text = value.strip()
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


class QueryRequest(BaseModel):
    sql: str = Field("", description="Statement text; must not be empty")
    args: list[Any] | None = Field(None, description="Positional bind arguments")


def decode_request(body: bytes | str) -> QueryRequest:
    """Parse a JSON request body, rejecting malformed input and empty SQL."""

    try:
        request = QueryRequest.model_validate_json(body)
    except ValidationError as exc:
        raise DecodeError(_describe_validation_error(exc)) from exc
    if request.sql == "":
        raise DecodeError("sql must not be empty")
    return request


def _describe_validation_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid request body"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = str(first.get("msg", "invalid request body"))
    return f"{location}: {message}" if location else message


@dataclass(slots=True)
class SQLGateway:
    """Turns one request into one response envelope."""

    executor: QueryExecutor
    query_logger: QueryObservationSink | None = None
    verbose_errors: bool = True
    request_id_factory: Callable[[], str] = field(default=lambda: uuid4().hex[:8])

    def handle(self, body: bytes | str) -> ResponseEnvelope:
        request_id = self.request_id_factory()
        try:
            request = decode_request(body)
        except DecodeError as exc:
            return self._fail(request_id, exc, category=None)
        return self._run(request_id, request)

    def handle_request(self, request: QueryRequest) -> ResponseEnvelope:
        request_id = self.request_id_factory()
        if request.sql == "":
            return self._fail(request_id, DecodeError("sql must not be empty"), category=None)
        return self._run(request_id, request)

    def _run(self, request_id: str, request: QueryRequest) -> ResponseEnvelope:
        category = classify(request.sql)
        arg_count = len(request.args or [])
        LOGGER.debug(
            "Request %s category=%s args=%s sql=%s",
            request_id,
            category.value,
            arg_count,
            _truncate_for_log(request.sql),
        )
        self._log_event(
            request_id,
            "statement_received",
            {"category": category.value, "sql": request.sql, "arg_count": arg_count},
        )

        try:
            outcome = self.executor.execute(request.sql, request.args, category)
        except GatewayError as exc:
            return self._fail(request_id, exc, category=category)

        self._log_event(request_id, "statement_completed", _summarize(category, outcome))
        return build_envelope(outcome)

    def _fail(
        self, request_id: str, error: GatewayError, *, category: Category | None
    ) -> ResponseEnvelope:
        log = LOGGER.warning if error.status_code >= 500 else LOGGER.info
        log("Request %s failed (%s): %s", request_id, error.kind, _truncate_for_log(error.message))
        self._log_event(
            request_id,
            "statement_failed",
            {
                "category": category.value if category is not None else None,
                "error_kind": error.kind,
                "code": error.status_code,
                "message": error.message,
            },
        )
        return build_error_envelope(error, verbose=self.verbose_errors)

    def _log_event(self, request_id: str, event: str, payload: dict[str, Any]) -> None:
        if self.query_logger is None:
            return
        self.query_logger.log_event(request_id, event, payload)


def _summarize(category: Category, outcome: ExecutionOutcome) -> dict[str, Any]:
    if isinstance(outcome, ReadOutcome):
        return {"category": category.value, "row_count": len(outcome.rows)}
    return {
        "category": category.value,
        "last_insert_id": outcome.last_insert_id,
        "rows_affected": outcome.rows_affected,
    }


__all__ = ["QueryRequest", "SQLGateway", "decode_request"]
