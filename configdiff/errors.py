"""Error kinds raised by the normalization, collation and diff engine."""

from __future__ import annotations


class ConfigDiffError(Exception):
    """Base class for every error raised by configdiff."""


class DecodeError(ConfigDiffError):
    """Raised when a string-encoded JSON fragment cannot be resolved."""

    _MAX_FRAGMENT = 120

    def __init__(self, message: str, fragment: str = "") -> None:
        self.fragment = fragment
        shown = fragment if len(fragment) <= self._MAX_FRAGMENT else fragment[: self._MAX_FRAGMENT] + "..."
        super().__init__(f"{message}: {shown!r}" if fragment else message)


class CollationError(ConfigDiffError):
    """Raised when a value cannot be serialized for ordering or equality."""

    def __init__(self, message: str, value_type: str = "") -> None:
        super().__init__(message)
        self.value_type = value_type


class NormalizeError(ConfigDiffError):
    """Raised when snapshot bytes or a snapshot item do not have the expected shape."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(f"{field}: {message}" if field else message)
        self.field = field
