"""Workspace file listing and filename lookup for manifest references.

Uses ``rg --files`` when ripgrep is installed and falls back to ``os.walk``.
Hidden directories and ``node_modules`` are skipped either way.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

EXCLUDED_DIR_NAMES = frozenset({"node_modules"})


def _excluded(relative_parts: tuple[str, ...]) -> bool:
    return any(part.startswith(".") or part in EXCLUDED_DIR_NAMES for part in relative_parts)


def _collect_files_walk(root: Path) -> list[Path]:
    files: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        base = Path(dirpath)
        dirnames[:] = sorted(
            (name for name in dirnames if not name.startswith(".") and name not in EXCLUDED_DIR_NAMES),
            key=str.lower,
        )
        for filename in sorted(filenames, key=str.lower):
            if filename.startswith("."):
                continue
            files.append(base / filename)
    return files


def _collect_files_rg(root: Path) -> list[Path] | None:
    if shutil.which("rg") is None:
        return None
    try:
        proc = subprocess.run(
            ["rg", "--files", "--no-ignore"],
            cwd=root,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None

    files: list[Path] = []
    for raw in proc.stdout.splitlines():
        if not raw:
            continue
        relative = Path(raw)
        if relative.is_absolute() or _excluded(relative.parts[:-1]) or relative.name.startswith("."):
            continue
        files.append(root / relative)
    return files


def collect_workspace_files(root: Path) -> list[Path]:
    """List files under ``root`` sorted by project-relative path."""
    root = root.resolve()
    files = _collect_files_rg(root)
    if files is None:
        files = _collect_files_walk(root)
    return sorted(files, key=lambda path: to_project_relative(path, root).casefold())


def to_project_relative(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def match_filename(name: str, files: list[Path], root: Path) -> list[Path]:
    """Files whose project-relative path is ``name`` or ends with ``/name``.

    Mirrors a ``**/<name>`` glob, so ``"src/a.cpp"`` matches
    ``lib/src/a.cpp`` but not ``lib/xsrc/a.cpp``.
    """
    needle = name.replace("\\", "/")
    while needle.startswith("./"):
        needle = needle[2:]
    if not needle:
        return []
    suffix = "/" + needle
    matches: list[Path] = []
    for path in files:
        relative = to_project_relative(path, root)
        if relative == needle or relative.endswith(suffix):
            matches.append(path)
    return matches


def find_files_by_name(root: Path, name: str) -> list[Path]:
    root = root.resolve()
    return match_filename(name, collect_workspace_files(root), root)


__all__ = [
    "EXCLUDED_DIR_NAMES",
    "collect_workspace_files",
    "find_files_by_name",
    "match_filename",
    "to_project_relative",
]
