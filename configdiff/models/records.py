"""Canonical record, snapshot and diff data structures."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TypeAlias

JSONValue: TypeAlias = None | bool | int | float | str | dict[str, "JSONValue"] | list["JSONValue"]
Record: TypeAlias = dict[str, JSONValue]

DIFFS_KEY = "diffs"


class FailureStage(StrEnum):
    """Pipeline step at which a single configuration item failed."""

    NORMALIZE = "normalize"
    CANONICALIZE = "canonicalize"
    DIFF = "diff"


@dataclass(frozen=True)
class ItemKey:
    """Identity of a configuration item within one comparison pass."""

    resource_id: str
    resource_type: str

    @classmethod
    def of(cls, record: Mapping[str, object]) -> ItemKey:
        return cls(
            resource_id=str(record.get("resourceId", "") or ""),
            resource_type=str(record.get("resourceType", "") or ""),
        )

    def __str__(self) -> str:
        return f"{self.resource_type}/{self.resource_id}"


@dataclass(frozen=True)
class DiffNode:
    """Changed fields between two canonical records.

    ``changes`` maps a changed key to its previous value (``None`` when the
    key was absent from the previous record). ``children`` maps a composite
    key to the nested DiffNode produced by recursing into it.
    """

    changes: dict[str, JSONValue] = field(default_factory=dict)
    children: dict[str, DiffNode] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.changes and not self.children

    def __bool__(self) -> bool:
        return not self.is_empty

    def to_dict(self) -> dict[str, JSONValue]:
        """Flatten into ``{key: old, composite: {"diffs": {...}}}``."""
        out: dict[str, JSONValue] = dict(self.changes)
        for key, child in self.children.items():
            out[key] = {DIFFS_KEY: child.to_dict()}
        return out


@dataclass(frozen=True)
class DiffedItem:
    """A canonical record paired with its diff against the snapshot.

    ``diff is None`` means the snapshot had no counterpart: the item is new.
    """

    record: Record
    diff: DiffNode | None = None

    @property
    def key(self) -> ItemKey:
        return ItemKey.of(self.record)

    @property
    def is_new(self) -> bool:
        return self.diff is None

    @property
    def has_changes(self) -> bool:
        return self.diff is None or not self.diff.is_empty


@dataclass(frozen=True)
class ItemFailure:
    """One item that could not be normalized or diffed."""

    index: int
    stage: FailureStage
    error: Exception
    key: ItemKey | None = None

    @property
    def message(self) -> str:
        return f"{type(self.error).__name__}: {self.error}"


@dataclass(frozen=True)
class Snapshot:
    """Canonical configuration items captured at a single instant."""

    items: tuple[Record, ...] = ()
    failures: tuple[ItemFailure, ...] = ()
    reference: object | None = None
    file_version: str = ""
    config_snapshot_id: str = ""

    def index(self) -> dict[ItemKey, Record]:
        """Map identity key to record; the first occurrence of a key wins."""
        found: dict[ItemKey, Record] = {}
        for record in self.items:
            found.setdefault(ItemKey.of(record), record)
        return found

    def find(self, key: ItemKey) -> Record | None:
        for record in self.items:
            if ItemKey.of(record) == key:
                return record
        return None


@dataclass(frozen=True)
class DiffResult:
    """Output of one diff pass over a batch of current items."""

    items: list[DiffedItem] = field(default_factory=list)
    reference: object | None = None
    failures: list[ItemFailure] = field(default_factory=list)

    @property
    def any_changes(self) -> bool:
        return any(item.has_changes for item in self.items)
