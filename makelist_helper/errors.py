"""Exception taxonomy for manifest editing.

Configuration problems and manifest I/O failures are the only raised errors.
Missing blocks, missing entries and missing manifests are ordinary outcomes.
"""

from __future__ import annotations

from pathlib import Path


class MakelistHelperError(Exception):
    """Base class for user-facing errors."""


class ConfigurationError(MakelistHelperError):
    """Raised when a setting is missing, malformed, or lacks an extension mapping."""


class ManifestIOError(MakelistHelperError):
    """Raised when a manifest cannot be read or written."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


__all__ = ["ConfigurationError", "MakelistHelperError", "ManifestIOError"]
