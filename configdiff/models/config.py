"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_COMPOSITE_FIELDS = ("configuration", "supplementaryConfiguration")
DEFAULT_PRESERVE_NULL_FIELDS = ("AccessControlList",)


@dataclass
class DiffPolicyConfig:
    """Diff Computer policy.

    ``composite_fields`` are top-level keys diffed recursively instead of as
    whole-value replacements. ``preserve_null_fields`` are keys whose subtree
    keeps its ``null`` leaves verbatim.
    """

    composite_fields: tuple[str, ...] = DEFAULT_COMPOSITE_FIELDS
    preserve_null_fields: tuple[str, ...] = DEFAULT_PRESERVE_NULL_FIELDS
    report_removed_keys: bool = False
    max_workers: int = 0


@dataclass
class RenderConfig:
    """Report Renderer thresholds and labels."""

    short_field_len: int = 40
    long_field_len: int = 400
    title: str = "Configuration Changes"


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    json_output: bool = True


@dataclass
class ConfigDiffConfig:
    """Top-level configdiff configuration."""

    diff: DiffPolicyConfig = field(default_factory=DiffPolicyConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    log: LogConfig = field(default_factory=LogConfig)
