"""JSON export of diffed items, attached next to the HTML report."""

from __future__ import annotations

import json
from collections.abc import Iterable

from configdiff.models.records import DiffedItem, JSONValue


def _status(item: DiffedItem) -> str:
    if item.is_new:
        return "new"
    return "changed" if item.has_changes else "unchanged"


def export_json(items: Iterable[DiffedItem], indent: int = 2) -> str:
    """Serialize *items* as a stable JSON document.

    The Diff Node is written beside the record under ``diffs`` rather than
    inside it; new items carry ``"diffs": null``.
    """
    payload: list[dict[str, JSONValue]] = []
    for item in items:
        key = item.key
        payload.append(
            {
                "resourceId": key.resource_id,
                "resourceType": key.resource_type,
                "status": _status(item),
                "record": item.record,
                "diffs": item.diff.to_dict() if item.diff is not None else None,
            }
        )
    return json.dumps(payload, indent=indent, sort_keys=True, ensure_ascii=False)
