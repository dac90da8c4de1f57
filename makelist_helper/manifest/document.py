"""Whole-file manifest reads and writes with per-path write serialization.

Manifests are read without newline translation and written back in the
encoding they were read with, so bytes outside an edited block never change.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from pathlib import Path

from ..errors import ManifestIOError

_LOCKS_GUARD = threading.Lock()
_MANIFEST_LOCKS: dict[Path, threading.RLock] = {}


@dataclass(frozen=True)
class ManifestDocument:
    """Full manifest text plus the encoding used to decode it."""

    path: Path
    text: str
    encoding: str = "utf-8"

    def with_text(self, text: str) -> ManifestDocument:
        return replace(self, text=text)


def _lock_key(path: Path) -> Path:
    try:
        return path.resolve()
    except OSError:
        return path.absolute()


@contextmanager
def manifest_lock(path: Path) -> Iterator[None]:
    """Serialize read-modify-write cycles against one manifest path."""
    key = _lock_key(path)
    with _LOCKS_GUARD:
        lock = _MANIFEST_LOCKS.get(key)
        if lock is None:
            lock = threading.RLock()
            _MANIFEST_LOCKS[key] = lock
    with lock:
        yield


def read_manifest(path: Path) -> ManifestDocument:
    """Read ``path`` as UTF-8, falling back to latin-1 for legacy files."""
    for encoding in ("utf-8", "latin-1"):
        try:
            with open(path, encoding=encoding, newline="") as handle:
                return ManifestDocument(path=path, text=handle.read(), encoding=encoding)
        except UnicodeDecodeError:
            continue
        except OSError as exc:
            raise ManifestIOError(path, exc.strerror or str(exc)) from exc
    raise ManifestIOError(path, "unable to decode file")


def write_manifest(document: ManifestDocument) -> None:
    try:
        with open(document.path, "w", encoding=document.encoding, newline="") as handle:
            handle.write(document.text)
    except OSError as exc:
        raise ManifestIOError(document.path, exc.strerror or str(exc)) from exc


__all__ = ["ManifestDocument", "manifest_lock", "read_manifest", "write_manifest"]
