"""Core data structures for configdiff."""

from configdiff.models.config import ConfigDiffConfig, DiffPolicyConfig, LogConfig, RenderConfig
from configdiff.models.records import (
    DiffedItem,
    DiffNode,
    DiffResult,
    FailureStage,
    ItemFailure,
    ItemKey,
    JSONValue,
    Record,
    Snapshot,
)

__all__ = [
    "ConfigDiffConfig",
    "DiffNode",
    "DiffPolicyConfig",
    "DiffResult",
    "DiffedItem",
    "FailureStage",
    "ItemFailure",
    "ItemKey",
    "JSONValue",
    "LogConfig",
    "Record",
    "RenderConfig",
    "Snapshot",
]
