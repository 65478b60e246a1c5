"""Diff Computer: the changed fields between two canonical records."""

from __future__ import annotations

from collections.abc import Iterable

from configdiff.collation import collation_equal
from configdiff.errors import CollationError
from configdiff.models.config import DEFAULT_COMPOSITE_FIELDS
from configdiff.models.records import DiffNode, JSONValue, Record

_MISSING = object()


def compute_diff(
    previous: Record,
    current: Record,
    composite_fields: Iterable[str] = DEFAULT_COMPOSITE_FIELDS,
    report_removed_keys: bool = False,
) -> DiffNode:
    """Return the fields of *current* that differ from *previous*.

    Only keys of *current* are walked, and only the previous value is kept:
    the current value is read from the record the report is rendered against.
    Keys named in *composite_fields* are diffed recursively when both sides
    are objects. With *report_removed_keys* set, keys present only in
    *previous* are recorded as well.
    """
    try:
        return _diff(previous, current, frozenset(composite_fields), report_removed_keys, nested=False)
    except RecursionError as exc:
        raise CollationError("records are nested too deeply to compare", "dict") from exc


def _diff(
    previous: Record,
    current: Record,
    composite: frozenset[str],
    report_removed_keys: bool,
    nested: bool,
) -> DiffNode:
    changes: dict[str, JSONValue] = {}
    children: dict[str, DiffNode] = {}

    for key, value in current.items():
        old = previous.get(key, _MISSING)
        if old is not _MISSING and collation_equal(old, value):
            continue
        if isinstance(old, dict) and isinstance(value, dict) and (nested or key in composite):
            child = _diff(old, value, composite, report_removed_keys, nested=True)
            if child:
                children[key] = child
                continue
        changes[key] = None if old is _MISSING else old  # type: ignore[assignment]

    if report_removed_keys:
        for key, old in previous.items():
            if key not in current:
                changes[key] = old

    return DiffNode(changes=changes, children=children)
