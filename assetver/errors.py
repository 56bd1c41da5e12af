from __future__ import annotations

from typing import Optional


class AssetError(Exception):
    """Base class for asset resolution errors."""


class ManifestError(AssetError):
    """Raised when the manifest cannot be produced from its source."""

    code = "manifest_error"

    def __init__(self, message: str, source: Optional[str] = None) -> None:
        self.source = source
        if source:
            message = f"{message} ({source})"
        super().__init__(message)


class ManifestUnreadable(ManifestError):
    code = "manifest_unreadable"


class ManifestMalformed(ManifestError):
    code = "manifest_malformed"


class InvalidFormatPattern(AssetError, ValueError):
    code = "invalid_format_pattern"

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"invalid asset format pattern {pattern!r}: {reason}")
