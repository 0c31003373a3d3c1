"""Canonical JSON serialization for signed payloads"""

import json
import math
from typing import Any

from vocdoni_core.shared.exceptions import MalformedInputException

# JavaScript switches to exponent notation from this magnitude on
_MAX_PLAIN_NUMBER = 1e21


def _canonical_number(value: float) -> Any:
    """Render floats the way JSON.stringify does: 1.0 -> 1, NaN -> null"""
    if not math.isfinite(value):
        return None
    if value.is_integer() and abs(value) < _MAX_PLAIN_NUMBER:
        return int(value)
    return value


def canonicalize(value: Any) -> Any:
    """
    Recursively sort the keys of every mapping in `value`.

    Lists keep their order; mappings nested inside them get their own keys
    sorted. Integral floats become ints and non-finite floats become None,
    so the output serializes like JSON.stringify. Other scalars are returned
    unchanged.

    Raises:
        MalformedInputException: If a mapping has non-string keys.
    """
    if isinstance(value, dict):
        if not all(isinstance(key, str) for key in value):
            raise MalformedInputException("Object keys must be strings")
        return {key: canonicalize(value[key]) for key in sorted(value)}
    if isinstance(value, (list, tuple)):
        return [canonicalize(item) for item in value]
    if isinstance(value, float):
        return _canonical_number(value)
    return value


def canonical_json(value: Any) -> str:
    """Compact JSON text of the canonicalized value, non-ASCII left as is"""
    return json.dumps(
        canonicalize(value), separators=(",", ":"), ensure_ascii=False
    )


def canonical_bytes(value: Any) -> bytes:
    return canonical_json(value).encode("utf-8")
