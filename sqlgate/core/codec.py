"""Conversion between driver-native column values and transport scalars."""

from __future__ import annotations

import base64
import math
from collections.abc import Sequence
from typing import Any, Union

from sqlgate.core.errors import ExecutionError

Scalar = Union[None, bool, int, float, str, bytes]

_PASSTHROUGH_TYPES = (bool, int, float, str)


def decode_value(value: Any) -> Scalar:
    """Return *value* as a transport scalar.

    ``None`` stays ``None`` so SQL NULL never collapses into ``""`` or ``0``.
    Integers and floats keep their type; binary payloads become ``bytes`` with
    the same content.
    """

    if value is None:
        return None
    if isinstance(value, _PASSTHROUGH_TYPES):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise ExecutionError(f"unsupported column value of type '{type(value).__name__}'")


def decode_row(columns: Sequence[str], values: Sequence[Any]) -> dict[str, Scalar]:
    """Materialise a fresh mapping of column name to decoded value."""

    return {column: decode_value(value) for column, value in zip(columns, values)}


def encode_args(args: Sequence[Any] | None) -> tuple[Any, ...]:
    """Pass client arguments to the driver in declared order, untouched."""

    if not args:
        return ()
    return tuple(args)


def to_transport(value: Scalar) -> Any:
    """Render *value* for JSON.

    Binary payloads are base64 encoded. JSON has no literal for non-finite
    floats, so they become the strings ``"Infinity"``, ``"-Infinity"`` and
    ``"NaN"``.
    """

    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    if isinstance(value, float) and not math.isfinite(value):
        if math.isnan(value):
            return "NaN"
        return "Infinity" if value > 0 else "-Infinity"
    return value


__all__ = ["Scalar", "decode_row", "decode_value", "encode_args", "to_transport"]
