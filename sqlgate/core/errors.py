"""Error taxonomy for the query gateway.

Each error carries the HTTP status the transport should answer with, so the
gateway can turn any failure into a response envelope without a lookup table.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base class for failures that terminate a single request."""

    status_code: int = 500
    kind: str = "internal"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class DecodeError(GatewayError):
    """Request body is not valid JSON, has the wrong shape, or has no SQL."""

    status_code = 400
    kind = "decode"


class ClassificationRejected(GatewayError):
    """Leading keyword of the statement is not recognised."""

    status_code = 400
    kind = "rejected"

    def __init__(self, message: str = "Invalid SQL") -> None:
        super().__init__(message)


class StoreError(GatewayError):
    """The store refused the statement or failed while running it."""

    status_code = 500
    kind = "store"


class PrepareError(StoreError):
    """The store could not compile the statement text.

    Covers syntax errors and references to unknown tables or columns. Lock
    contention, read-only files and I/O faults are ``ExecutionError``.
    """

    kind = "prepare"


class ExecutionError(StoreError):
    """Binding, execution or row retrieval failed."""

    kind = "execution"


__all__ = [
    "ClassificationRejected",
    "DecodeError",
    "ExecutionError",
    "GatewayError",
    "PrepareError",
    "StoreError",
]
