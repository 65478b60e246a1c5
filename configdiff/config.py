"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from configdiff.models.config import (
    DEFAULT_COMPOSITE_FIELDS,
    DEFAULT_PRESERVE_NULL_FIELDS,
    ConfigDiffConfig,
    DiffPolicyConfig,
    LogConfig,
    RenderConfig,
)


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"CONFIGDIFF_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_list(key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = _env(key, ",".join(default))
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def load_config() -> ConfigDiffConfig:
    """Load configuration from CONFIGDIFF_* environment variables."""
    short_len = _env_int("SHORT_FIELD_LEN", 40, min_val=1)
    return ConfigDiffConfig(
        diff=DiffPolicyConfig(
            composite_fields=_env_list("COMPOSITE_FIELDS", DEFAULT_COMPOSITE_FIELDS),
            preserve_null_fields=_env_list("PRESERVE_NULL_FIELDS", DEFAULT_PRESERVE_NULL_FIELDS),
            report_removed_keys=_env_bool("REPORT_REMOVED_KEYS", False),
            max_workers=_env_int("MAX_WORKERS", 0, min_val=0, max_val=32),
        ),
        render=RenderConfig(
            short_field_len=short_len,
            long_field_len=_env_int("LONG_FIELD_LEN", 400, min_val=short_len),
            title=_env("REPORT_TITLE", "Configuration Changes"),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
            json_output=_env_bool("LOG_JSON", True),
        ),
    )
