"""Canonical decoder for string-encoded JSON.

The resource-history API returns sub-documents as escaped JSON text, in some
cases quoted or percent-encoded more than once. ``decode_value`` resolves
those strings into native values; every branch either unwraps one layer or
stops at a terminal string, so decoding always terminates.
"""

from __future__ import annotations

import json
import re
from urllib.parse import unquote_plus

from configdiff.collation import collation_key
from configdiff.errors import DecodeError
from configdiff.models.records import JSONValue

NULL_SENTINEL = "null"

_BAD_PERCENT_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def _parse(text: str) -> JSONValue:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"malformed JSON fragment ({exc.msg} at {exc.pos})", text) from exc
    except RecursionError as exc:
        raise DecodeError("fragment nested too deeply", text) from exc


def _unquote(text: str) -> str:
    value = _parse(text)
    if not isinstance(value, str):
        raise DecodeError("quoted fragment did not decode to a string", text)
    return value


def _percent_decode(text: str) -> str:
    if _BAD_PERCENT_ESCAPE.search(text):
        raise DecodeError("invalid percent escape", text)
    try:
        return unquote_plus(text, errors="strict")
    except UnicodeDecodeError as exc:
        raise DecodeError("percent-decoded bytes are not UTF-8", text) from exc


def decode_string(text: str) -> JSONValue:
    """Resolve one possibly string-encoded value."""
    if not text:
        return text
    head = text[0]
    if head == "{":
        parsed = _parse(text)
        if not isinstance(parsed, dict):
            raise DecodeError("expected a JSON object", text)
        return decode_object(parsed)
    if head == "[":
        parsed = _parse(text)
        if not isinstance(parsed, list):
            raise DecodeError("expected a JSON array", text)
        # arrays from encoded text carry no order guarantee
        return sorted(decode_array(parsed), key=collation_key)
    if head == '"':
        return decode_string(_unquote(text))
    if head == "%":
        return decode_string(_percent_decode(text))
    if text == NULL_SENTINEL:
        return {}
    return text


def decode_object(obj: dict[str, JSONValue]) -> dict[str, JSONValue]:
    return {key: decode_value(value) for key, value in obj.items()}


def decode_array(items: list[JSONValue]) -> list[JSONValue]:
    return [decode_value(item) for item in items]


def decode_value(value: JSONValue) -> JSONValue:
    """Recursively resolve every string-encoded fragment inside *value*."""
    if isinstance(value, str):
        return decode_string(value)
    if isinstance(value, dict):
        return decode_object(value)
    if isinstance(value, list):
        return decode_array(value)
    return value
