"""Dialect normalization.

Two JSON shapes describe the same configuration item: the live
resource-history API dialect and the periodic snapshot dialect. Snapshot
items are rewritten into the live dialect, then both go through the same
canonical pipeline: decode string-encoded fragments, render timestamps,
prune ``null`` leaves and sort every array in collation order.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import cast

from configdiff.collation import collation_sorted
from configdiff.decoder import decode_value
from configdiff.errors import NormalizeError
from configdiff.models.config import DEFAULT_PRESERVE_NULL_FIELDS
from configdiff.models.records import JSONValue, Record

CAPTURE_TIME_KEY = "configurationItemCaptureTime"

# snapshot key -> live key
_RENAMES: dict[str, str] = {
    "configurationStateMd5Hash": "configurationItemMD5Hash",
    "configurationItemVersion": "version",
    "awsAccountId": "accountId",
    "ARN": "arn",
}

_FRACTIONAL_SECONDS = re.compile(r"\.\d*Z")


def strip_fractional_seconds(timestamp: str) -> str:
    return _FRACTIONAL_SECONDS.sub("Z", timestamp)


def format_timestamp(value: datetime) -> str:
    """Render *value* as UTC ISO-8601 with milliseconds, as snapshot files do.

    Naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    value = value.astimezone(UTC)
    return value.strftime("%Y-%m-%dT%H:%M:%S") + f".{value.microsecond // 1000:03d}Z"


def _encode(value: object, field: str) -> str:
    try:
        return json.dumps(value, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError, RecursionError) as exc:
        raise NormalizeError(f"cannot re-encode value: {exc}", field) from exc


def _state_id(value: object) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and math.isfinite(value):
        return str(int(value))
    raise NormalizeError(f"expected a number or string, got {type(value).__name__}", "configurationStateId")


def _relationships(value: object) -> list[JSONValue]:
    if not isinstance(value, list):
        raise NormalizeError(f"expected a list, got {type(value).__name__}", "relationships")
    out: list[JSONValue] = []
    for rel in value:
        if isinstance(rel, dict) and "name" in rel:
            rel = {("relationshipName" if k == "name" else k): v for k, v in rel.items()}
        out.append(rel)
    return out


def _supplementary(value: object) -> JSONValue:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise NormalizeError(f"expected an object, got {type(value).__name__}", "supplementaryConfiguration")
    return {name: _encode(entry, f"supplementaryConfiguration.{name}") for name, entry in value.items()}


def rewrite_snapshot_item(item: Mapping[str, object]) -> dict[str, JSONValue]:
    """Rewrite one snapshot-dialect item into the live dialect.

    Pure and order-independent; unrecognized keys pass through unchanged.
    """
    out: dict[str, JSONValue] = {}
    for key, value in item.items():
        if key == "configuration":
            out[key] = _encode(value, key)
        elif key == "configurationStateId":
            out[key] = _state_id(value)
        elif key == "supplementaryConfiguration":
            out[key] = _supplementary(value)
        elif key == "relationships":
            out[key] = _relationships(value)
        elif key == CAPTURE_TIME_KEY and isinstance(value, str):
            out[key] = strip_fractional_seconds(value)
        else:
            out[_RENAMES.get(key, key)] = value  # type: ignore[assignment]
    return out


def _render_native(value: object) -> JSONValue:
    """Convert SDK-native values (datetimes, tuples) into JSON values."""
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, dict):
        return {str(k): _render_native(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_render_native(v) for v in value]
    return value  # type: ignore[return-value]


def prune_nulls(value: JSONValue, preserve: Iterable[str] = DEFAULT_PRESERVE_NULL_FIELDS) -> JSONValue:
    """Drop ``null``-valued object entries everywhere except under *preserve* keys.

    ``null`` array elements are kept; only object entries are removed.
    """
    keep = frozenset(preserve)

    def _walk(node: JSONValue) -> JSONValue:
        if isinstance(node, dict):
            return {k: (v if k in keep else _walk(v)) for k, v in node.items() if v is not None}
        if isinstance(node, list):
            return [_walk(v) for v in node]
        return node

    return _walk(value)


def canonicalize(item: Mapping[str, object], preserve_null_fields: Iterable[str] = DEFAULT_PRESERVE_NULL_FIELDS) -> Record:
    """Turn a live-dialect item into a canonical record.

    Idempotent: canonicalizing a canonical record returns an equal record.
    """
    if not isinstance(item, Mapping):
        raise NormalizeError(f"configuration item must be an object, got {type(item).__name__}")
    try:
        rendered = cast(Record, _render_native(dict(item)))
        capture_time = rendered.get(CAPTURE_TIME_KEY)
        if isinstance(capture_time, str):
            rendered[CAPTURE_TIME_KEY] = strip_fractional_seconds(capture_time)
        decoded = decode_value(rendered)
        if not isinstance(decoded, dict):
            raise NormalizeError("configuration item did not decode to an object")
        pruned = prune_nulls(decoded, preserve_null_fields)
    except RecursionError as exc:
        raise NormalizeError("configuration item is nested too deeply") from exc
    return cast(Record, collation_sorted(pruned))


def normalize_snapshot_item(
    item: object,
    preserve_null_fields: Iterable[str] = DEFAULT_PRESERVE_NULL_FIELDS,
) -> Record:
    """Rewrite and canonicalize one snapshot-dialect item."""
    if not isinstance(item, dict):
        raise NormalizeError(f"configuration item must be an object, got {type(item).__name__}")
    return canonicalize(rewrite_snapshot_item(item), preserve_null_fields)
