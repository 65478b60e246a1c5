"""Batch operations: normalize a snapshot, diff current items against it.

Each item is processed independently. A failure while normalizing or
diffing one item is logged, recorded as an ItemFailure and excluded from
the output; sibling items are unaffected.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from contextlib import AbstractContextManager

import structlog

from configdiff.dialect import canonicalize, normalize_snapshot_item
from configdiff.differ import compute_diff
from configdiff.errors import ConfigDiffError, NormalizeError
from configdiff.models.config import ConfigDiffConfig
from configdiff.models.records import (
    DiffedItem,
    DiffResult,
    FailureStage,
    ItemFailure,
    ItemKey,
    Record,
    Snapshot,
)
from configdiff.observability.logging import item_context

_log = structlog.get_logger(component="pipeline")

_ITEMS_KEY = "configurationItems"


def _raw_key(item: object) -> ItemKey | None:
    if isinstance(item, Mapping):
        return ItemKey.of(item)
    return None


def _context(index: int, key: ItemKey | None) -> AbstractContextManager[None]:
    if key is None:
        return item_context(index)
    return item_context(index, key.resource_id, key.resource_type)


def normalize(
    raw: bytes | str,
    reference: object | None = None,
    config: ConfigDiffConfig | None = None,
) -> Snapshot:
    """Parse snapshot bytes into a Snapshot of canonical records.

    Raises:
        NormalizeError: the bytes are not a JSON object, or
            ``configurationItems`` is not a list. No partial Snapshot is
            returned in that case.
    """
    cfg = config or ConfigDiffConfig()
    try:
        document = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise NormalizeError(f"snapshot is not valid JSON: {exc}") from exc
    except RecursionError as exc:
        raise NormalizeError("snapshot is nested too deeply") from exc
    if not isinstance(document, dict):
        raise NormalizeError(f"snapshot must be a JSON object, got {type(document).__name__}")

    raw_items = document.get(_ITEMS_KEY)
    if raw_items is None:
        raw_items = []
    if not isinstance(raw_items, list):
        raise NormalizeError(f"expected a list, got {type(raw_items).__name__}", _ITEMS_KEY)

    items: list[Record] = []
    failures: list[ItemFailure] = []
    for index, raw_item in enumerate(raw_items):
        key = _raw_key(raw_item)
        with _context(index, key):
            try:
                items.append(normalize_snapshot_item(raw_item, cfg.diff.preserve_null_fields))
            except ConfigDiffError as exc:
                _log.warning("snapshot_item_rejected", error=str(exc), error_kind=type(exc).__name__)
                failures.append(ItemFailure(index=index, stage=FailureStage.NORMALIZE, error=exc, key=key))

    _log.info(
        "snapshot_normalized",
        items=len(items),
        failures=len(failures),
        config_snapshot_id=str(document.get("configSnapshotId", "")),
    )
    return Snapshot(
        items=tuple(items),
        failures=tuple(failures),
        reference=reference,
        file_version=str(document.get("fileVersion", "") or ""),
        config_snapshot_id=str(document.get("configSnapshotId", "") or ""),
    )


def _diff_one(
    index: int,
    item: Mapping[str, object],
    previous_by_key: dict[ItemKey, Record],
    cfg: ConfigDiffConfig,
) -> DiffedItem | ItemFailure:
    key = _raw_key(item)
    stage = FailureStage.CANONICALIZE
    with _context(index, key):
        try:
            record = canonicalize(item, cfg.diff.preserve_null_fields)
            key = ItemKey.of(record)
            previous = previous_by_key.get(key)
            if previous is None:
                _log.debug("item_new")
                return DiffedItem(record=record, diff=None)
            stage = FailureStage.DIFF
            node = compute_diff(
                previous,
                record,
                composite_fields=cfg.diff.composite_fields,
                report_removed_keys=cfg.diff.report_removed_keys,
            )
            return DiffedItem(record=record, diff=node)
        except ConfigDiffError as exc:
            _log.warning("item_diff_failed", stage=stage.value, error=str(exc), error_kind=type(exc).__name__)
            return ItemFailure(index=index, stage=stage, error=exc, key=key)


def diff(
    current_items: Iterable[Mapping[str, object]],
    snapshot: Snapshot,
    config: ConfigDiffConfig | None = None,
) -> DiffResult:
    """Diff every current item against its snapshot counterpart.

    Items with no counterpart are returned as new (``diff is None``).
    Output order follows input order, also when ``max_workers`` > 0.
    """
    cfg = config or ConfigDiffConfig()
    previous_by_key = snapshot.index()
    indexed = list(enumerate(current_items))

    def _run(pair: tuple[int, Mapping[str, object]]) -> DiffedItem | ItemFailure:
        return _diff_one(pair[0], pair[1], previous_by_key, cfg)

    if cfg.diff.max_workers > 0 and len(indexed) > 1:
        with ThreadPoolExecutor(max_workers=cfg.diff.max_workers) as pool:
            outcomes = list(pool.map(_run, indexed))
    else:
        outcomes = [_run(pair) for pair in indexed]

    items = [o for o in outcomes if isinstance(o, DiffedItem)]
    failures = [o for o in outcomes if isinstance(o, ItemFailure)]
    _log.info(
        "items_diffed",
        items=len(items),
        new=sum(1 for i in items if i.is_new),
        changed=sum(1 for i in items if not i.is_new and i.has_changes),
        failures=len(failures),
    )
    return DiffResult(items=items, reference=snapshot.reference, failures=failures)
