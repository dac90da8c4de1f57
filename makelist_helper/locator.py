"""Nearest-first manifest discovery bounded by workspace roots."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from .manifest.types import MANIFEST_FILENAME

logger = logging.getLogger(__name__)


def normalized_workspace_roots(roots: Iterable[Path]) -> list[Path]:
    """Resolve roots to directories, dropping duplicates and missing paths."""
    normalized: list[Path] = []
    for candidate in roots:
        try:
            resolved = candidate.resolve()
        except OSError:
            continue
        if not resolved.exists():
            continue
        root = resolved if resolved.is_dir() else resolved.parent
        if root not in normalized:
            normalized.append(root)
    return normalized


def workspace_root_for(path: Path, roots: Iterable[Path]) -> Path | None:
    """Return the deepest workspace root containing ``path``, if any."""
    resolved = path.resolve()
    best: Path | None = None
    for root in roots:
        root = root.resolve()
        if not resolved.is_relative_to(root):
            continue
        if best is None or len(root.parts) > len(best.parts):
            best = root
    return best


def directory_for_selection(path: Path) -> Path:
    """A selected directory is used as-is; a selected file resolves to its parent."""
    resolved = path.resolve()
    return resolved if resolved.is_dir() else resolved.parent


def find_manifests(
    start_path: Path,
    workspace_roots: Iterable[Path],
    filename: str = MANIFEST_FILENAME,
) -> list[Path]:
    """Collect manifests from ``start_path`` upward, nearest first.

    The walk starts at ``start_path`` when it is a directory and at its parent
    otherwise, and stops at the filesystem root or when leaving the workspace
    root that owns the start directory. The filesystem root is never searched.
    No owning root means no manifests.
    """
    current = directory_for_selection(start_path)
    boundary = workspace_root_for(current, workspace_roots)
    if boundary is None:
        logger.debug("%s is outside every workspace root", current)
        return []

    manifests: list[Path] = []
    while current.is_relative_to(boundary) and current.parent != current:
        candidate = current / filename
        if candidate.is_file():
            manifests.append(candidate)
        current = current.parent
    return manifests


__all__ = [
    "directory_for_selection",
    "find_manifests",
    "normalized_workspace_roots",
    "workspace_root_for",
]
