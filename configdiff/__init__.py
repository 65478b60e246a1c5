"""configdiff -- structural diff of cloud configuration items against snapshots.

Exports the three batch operations:

    normalize -- snapshot bytes -> Snapshot of canonical records
    diff      -- current items + Snapshot -> DiffResult
    render    -- diffed items -> Report(html, any_changes)
"""

from configdiff.dialect import canonicalize as canonicalize_item
from configdiff.dialect import normalize_snapshot_item
from configdiff.errors import CollationError, ConfigDiffError, DecodeError, NormalizeError
from configdiff.models.records import DiffedItem, DiffNode, DiffResult, ItemFailure, ItemKey, Snapshot
from configdiff.pipeline import diff, normalize
from configdiff.report import Report, export_json, render

__version__ = "0.1.0"

__all__ = [
    "CollationError",
    "ConfigDiffError",
    "DecodeError",
    "DiffNode",
    "DiffResult",
    "DiffedItem",
    "ItemFailure",
    "ItemKey",
    "NormalizeError",
    "Report",
    "Snapshot",
    "canonicalize_item",
    "diff",
    "export_json",
    "normalize",
    "normalize_snapshot_item",
    "render",
]
