"""Stable collation over JSON-like values.

Every value is ranked by its canonical serialized text: object keys sorted,
integral floats written as integers, and every nested array sorted by the
canonical text of its elements. Two values are equal under collation when
their canonical texts match, which ignores array order but keeps
multiplicities.
"""

from __future__ import annotations

import json

from configdiff.errors import CollationError
from configdiff.models.records import JSONValue


def _stabilize(value: object) -> JSONValue:
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else value
    if isinstance(value, dict):
        return {_key(k): _stabilize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return sorted((_stabilize(v) for v in value), key=_dump)
    raise CollationError(f"unsupported type for collation: {type(value).__name__}", type(value).__name__)


def _key(key: object) -> str:
    if not isinstance(key, str):
        raise CollationError(f"object keys must be strings, got {type(key).__name__}", type(key).__name__)
    return key


def _dump(value: JSONValue) -> str:
    try:
        return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise CollationError(f"value is not serializable: {exc}", type(value).__name__) from exc


def collation_key(value: object) -> str:
    """Return the canonical text used to rank *value*."""
    try:
        return _dump(_stabilize(value))
    except RecursionError as exc:
        raise CollationError("value is nested too deeply", type(value).__name__) from exc


def _sorted(value: object) -> JSONValue:
    if isinstance(value, dict):
        return {_key(k): _sorted(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        items = [_sorted(v) for v in value]
        return sorted(items, key=collation_key)
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    raise CollationError(f"unsupported type for collation: {type(value).__name__}", type(value).__name__)


def collation_sorted(value: object) -> JSONValue:
    """Return a copy of *value* with every nested array in collation order."""
    try:
        return _sorted(value)
    except RecursionError as exc:
        raise CollationError("value is nested too deeply", type(value).__name__) from exc


def collation_equal(a: object, b: object) -> bool:
    """Structural equality ignoring array order but respecting duplicates."""
    return collation_key(a) == collation_key(b)


def compare(a: object, b: object) -> int:
    """Three-way comparison of *a* and *b* by collation rank."""
    ka, kb = collation_key(a), collation_key(b)
    return (ka > kb) - (ka < kb)
