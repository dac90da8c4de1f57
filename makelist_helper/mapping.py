"""Extension to declaration-name mapping for managed source files."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigurationError


@dataclass(frozen=True)
class ManagedSelection:
    """Selected paths whose extension has a declaration name."""

    paths: tuple[Path, ...]
    mapping: Mapping[str, str]


def file_extension(path: Path | str) -> str:
    """Return the lower-cased extension of ``path`` including the leading dot."""
    return os.path.splitext(str(path))[1].lower()


def map_extension(path: Path | str, mapping: Mapping[str, str]) -> str | None:
    return mapping.get(file_extension(path))


def target_variable(path: Path | str, mapping: Mapping[str, str] | None) -> str:
    """Return the declaration name for ``path`` or raise ``ConfigurationError``."""
    if mapping is None:
        raise ConfigurationError("No mapping found in settings (setFileMapping).")
    name = map_extension(path, mapping)
    if not name:
        raise ConfigurationError(
            f"No mapping configured for extension '{file_extension(path)}' in setFileMapping"
        )
    return name


def filter_managed(
    paths: Iterable[Path],
    mapping: Mapping[str, str] | None,
) -> ManagedSelection | None:
    """Keep paths with a mapped extension, preserving selection order.

    Returns ``None`` when none of the paths are managed so callers can warn the
    user instead of silently doing nothing.
    """
    if mapping is None:
        raise ConfigurationError("No mapping found in settings (setFileMapping).")
    managed = tuple(path for path in paths if map_extension(path, mapping) is not None)
    if not managed:
        return None
    return ManagedSelection(paths=managed, mapping=mapping)


__all__ = [
    "ManagedSelection",
    "file_extension",
    "filter_managed",
    "map_extension",
    "target_variable",
]
