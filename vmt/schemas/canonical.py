"""
Module 01 - Schemas & Serialization
File: canonical.py

Purpose: Deterministic conversion of input values to the bytes that get
hashed into Merkle leaves.

Serialization Rules (Hard Contracts):
1. bytes / bytearray / memoryview: used as-is
2. str: UTF-8 encoded
3. Anything else: JSON_VALUE_TAG followed by canonical JSON, UTF-8 encoded
   - Sorted keys, no whitespace
   - None values kept as null
   - Datetimes as ISO-8601 with Z suffix
   - Enums as their values
   - Bytes nested inside containers as lowercase hex
   - NaN/Infinity and unsupported types are rejected

CRITICAL: All outputs from this module MUST be deterministic across runs.
"""

import json
import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel

from .errors import SerializationError

# Canonical JSON separators - no whitespace
CANONICAL_JSON_SEPARATORS: tuple[str, str] = (",", ":")

# Lead byte of every JSON-encoded value. 0xFF never occurs in UTF-8, so a
# structured value never serializes like a str (1 vs "1", None vs "null").
JSON_VALUE_TAG: bytes = b"\xff"


def ensure_utc(dt: datetime) -> datetime:
    """
    Ensure a datetime is timezone-aware and in UTC.

    Naive datetimes are treated as UTC; aware ones are converted.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_datetime_canonical(dt: datetime) -> str:
    """
    Format a datetime as ISO-8601 with Z suffix for UTC.

    Returns:
        ISO-8601 formatted string (e.g., "2026-01-27T21:35:00Z").
    """
    utc_dt = ensure_utc(dt)
    # Use microseconds=0 format if no microseconds, otherwise include them
    if utc_dt.microsecond == 0:
        return utc_dt.strftime("%Y-%m-%dT%H:%M:%SZ")
    else:
        return utc_dt.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _validate_float(value: float, path: str = "") -> None:
    if not math.isfinite(value):
        raise SerializationError(
            message=f"Non-finite float value encountered: {value}",
            details={"path": path, "value": str(value)},
        )


def canonicalize_value(value: Any, path: str = "") -> Any:
    """
    Recursively canonicalize a value for deterministic JSON serialization.

    Args:
        value: Any Python value to canonicalize.
        path: Current path for error reporting.

    Returns:
        A JSON-serializable canonical representation.

    Raises:
        SerializationError: If the value (or anything nested in it)
            cannot be canonicalized.
    """
    if value is None:
        return None

    if isinstance(value, Enum):
        # Before str/int: str- and int-valued enums subclass them
        return canonicalize_value(value.value, path)

    if isinstance(value, bool):
        # Must check bool before int since bool is subclass of int
        return value

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        _validate_float(value, path)
        return value

    if isinstance(value, str):
        return value

    if isinstance(value, datetime):
        return format_datetime_canonical(value)

    if isinstance(value, BaseModel):
        dumped = value.model_dump(
            mode="json",
            by_alias=True,
        )
        return canonicalize_value(dumped, path)

    if isinstance(value, dict):
        result = {}
        for k, v in value.items():
            if not isinstance(k, str):
                raise SerializationError(
                    message=f"Dictionary keys must be strings, got {type(k).__name__}",
                    details={"path": path, "key_type": type(k).__name__},
                )
            result[k] = canonicalize_value(v, f"{path}.{k}" if path else k)
        return result

    if isinstance(value, (list, tuple)):
        return [
            canonicalize_value(item, f"{path}[{i}]")
            for i, item in enumerate(value)
        ]

    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()

    raise SerializationError(
        message=f"Cannot serialize value of type {type(value).__name__}",
        details={"path": path, "type": type(value).__name__},
    )


def dumps_canonical(obj: Any) -> str:
    """
    Serialize an object to a canonical JSON string.

    Example:
        >>> dumps_canonical({"b": 2, "a": 1})
        '{"a":1,"b":2}'
    """
    canonicalized = canonicalize_value(obj)
    try:
        return json.dumps(
            canonicalized,
            sort_keys=True,
            separators=CANONICAL_JSON_SEPARATORS,
            ensure_ascii=False,
        )
    except (TypeError, ValueError) as e:
        raise SerializationError(
            message=f"Failed to serialize to canonical JSON: {e}",
            details={"type": type(obj).__name__, "error": str(e)},
        ) from e


def loads_canonical(json_str: str) -> Any:
    """
    Parse a canonical JSON string.

    Note: This does NOT restore datetime objects - they remain as strings.
    """
    return json.loads(json_str)


def serialize_value(value: Any) -> bytes:
    """
    Convert an input value to the bytes hashed into its Merkle leaf.

    Raw byte sequences pass through unchanged and strings are UTF-8
    encoded, so ``serialize_value("a") == b"a"``. Every other value is
    JSON_VALUE_TAG followed by its canonical JSON, so ``1`` and ``"1"`` get
    different leaves. A bytes value is the caller's own encoding and may
    equal the serialization of a str or tagged value.

    Args:
        value: The value to serialize.

    Returns:
        The serialized bytes.

    Raises:
        SerializationError: If the value cannot be serialized.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)

    if isinstance(value, str):
        try:
            return value.encode("utf-8")
        except UnicodeEncodeError as e:
            # lone surrogates
            raise SerializationError(
                message=f"String is not valid UTF-8: {e}",
                details={"type": "str", "error": str(e)},
            ) from e

    return JSON_VALUE_TAG + dumps_canonical(value).encode("utf-8")
