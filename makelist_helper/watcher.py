"""Prune manifest entries for deleted source files.

A watchdog observer reports deletions of files with managed extensions.
Deletions are coalesced over a short quiet window so removing a directory
produces one prompt, then removed batch-wise from a chosen manifest with the
option to retry the leftovers against another manifest.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler, PatternMatchingEventHandler
from watchdog.observers import Observer

from .commands import offer_open, select_manifest
from .config import Settings
from .debounce import CoalescingBuffer
from .errors import MakelistHelperError
from .manifest import EditOutcome, remove_entry
from .mapping import map_extension
from .prompts import ERROR, INFO, NO, SELECT_ANOTHER, SKIP, YES, Prompter

logger = logging.getLogger(__name__)

DELETE_BATCH_SECONDS = 0.5


def watch_patterns(extensions: Sequence[str]) -> list[str]:
    """Glob patterns matching files with any of ``extensions``."""
    return [f"*{ext}" for ext in extensions]


class _DeletedFileHandler(PatternMatchingEventHandler):
    def __init__(self, patterns: list[str], on_deleted: Callable[[Path], None]) -> None:
        super().__init__(patterns=patterns, ignore_directories=True, case_sensitive=False)
        self._on_deleted = on_deleted

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._on_deleted(Path(str(event.src_path)))


class _SettingsFileHandler(FileSystemEventHandler):
    def __init__(self, settings_path: Path, on_change: Callable[[], None]) -> None:
        super().__init__()
        self._settings_path = settings_path
        self._on_change = on_change

    def _maybe_reload(self, path: str) -> None:
        if Path(path).name == self._settings_path.name:
            self._on_change()

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._maybe_reload(str(event.src_path))

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._maybe_reload(str(event.src_path))

    def on_moved(self, event: FileSystemEvent) -> None:
        self._maybe_reload(str(getattr(event, "dest_path", "")))


class ChangeWatcher:
    """Watch ``workspace_roots`` for deleted managed files and offer cleanup."""

    def __init__(
        self,
        workspace_roots: Sequence[Path],
        settings: Settings,
        prompter: Prompter,
        delay_seconds: float = DELETE_BATCH_SECONDS,
        observer_factory: Callable[[], object] = Observer,
    ) -> None:
        self.workspace_roots = list(workspace_roots)
        self.settings = settings
        self._prompter = prompter
        self._observer_factory = observer_factory
        self._lock = threading.Lock()
        self._observer = None
        self._settings_observer = None
        self._extensions: tuple[str, ...] = tuple(settings.supported_extensions)
        self._deleted: CoalescingBuffer[Path] = CoalescingBuffer(
            delay_seconds,
            self.handle_deleted_files,
            name="makelist-helper-delete-batch",
        )

    @property
    def extensions(self) -> tuple[str, ...]:
        return self._extensions

    def _build_observer(self):
        observer = self._observer_factory()
        handler = _DeletedFileHandler(watch_patterns(self._extensions), self.record_deletion)
        for root in self.workspace_roots:
            observer.schedule(handler, str(root), recursive=True)
        return observer

    def start(self) -> None:
        with self._lock:
            if self._observer is not None:
                return
            self._observer = self._build_observer()
            self._observer.start()
        logger.info("Watching %s for deleted %s files", ", ".join(map(str, self.workspace_roots)), ", ".join(self._extensions))

    def watch_settings(self, settings_path: Path, reload_settings: Callable[[], Settings]) -> None:
        """Rebuild the watch patterns whenever ``settings_path`` changes."""

        def on_change() -> None:
            try:
                settings = reload_settings()
            except Exception as exc:
                logger.error("Failed to reload settings from %s: %s", settings_path, exc)
                return
            self.settings = settings
            self.update_extensions(settings.supported_extensions)

        observer = self._observer_factory()
        observer.schedule(_SettingsFileHandler(settings_path, on_change), str(settings_path.parent), recursive=False)
        observer.start()
        self._settings_observer = observer

    def update_extensions(self, extensions: Sequence[str]) -> None:
        """Tear down and rebuild the observer when managed extensions change."""
        new_extensions = tuple(extensions)
        if new_extensions == self._extensions:
            return
        with self._lock:
            self._extensions = new_extensions
            old = self._observer
            if old is None:
                return
            self._observer = self._build_observer()
            self._observer.start()
        old.stop()
        old.join()
        logger.info("Watch patterns updated: %s", ", ".join(watch_patterns(new_extensions)))

    def record_deletion(self, path: Path) -> None:
        """Queue one deletion; the batch flushes after the quiet window."""
        if path.suffix.lower() not in self._extensions:
            return
        logger.debug("File deleted: %s", path)
        self._deleted.add(path)

    def handle_deleted_files(self, paths: list[Path]) -> int:
        """Offer to remove ``paths`` from manifests; return how many were removed."""
        logger.info("Files deleted: %s", [str(path) for path in paths])
        mapping = self.settings.file_mapping
        paths = [path for path in paths if map_extension(path, mapping) is not None]
        if not paths:
            return 0

        answer = self._prompter.confirm(
            f"{len(paths)} file(s) were deleted. Remove them from CMakeLists.txt?",
            (YES, NO),
        )
        if answer != YES:
            return 0

        processed: set[Path] = set()
        try:
            last_manifest = self._prune_manifests(paths, processed)
        except MakelistHelperError as exc:
            logger.error("Failed to prune deleted files: %s", exc)
            self._prompter.notify(ERROR, str(exc))
            return len(processed)

        if processed and last_manifest is not None:
            offer_open(
                self._prompter,
                INFO,
                f"Processed {len(processed)} file(s) from CMakeLists.txt",
                last_manifest,
            )
        return len(processed)

    def _prune_manifests(self, paths: list[Path], processed: set[Path]) -> Path | None:
        """Remove ``paths`` manifest by manifest, never offering one twice."""
        mapping = self.settings.file_mapping
        tried: set[Path] = set()
        selected = select_manifest(paths[0], self.workspace_roots, self._prompter)
        last_manifest = selected
        remaining = list(paths)

        while selected is not None and remaining and selected not in tried:
            tried.add(selected)
            last_manifest = selected
            not_found: list[Path] = []
            for path in remaining:
                outcome = remove_entry(selected, path, mapping, self.settings.block_strictness)
                if outcome is EditOutcome.REMOVED:
                    processed.add(path)
                else:
                    not_found.append(path)

            if not not_found:
                break
            retry = self._prompter.confirm(
                f"{len(not_found)} file(s) were not found in this CMakeLists.txt. Try another one?",
                (SELECT_ANOTHER, SKIP),
            )
            if retry != SELECT_ANOTHER:
                break
            remaining = not_found
            selected = select_manifest(remaining[0], self.workspace_roots, self._prompter, exclude=tried)
        return last_manifest

    def dispose(self) -> None:
        self._deleted.cancel()
        with self._lock:
            observers = [self._observer, self._settings_observer]
            self._observer = None
            self._settings_observer = None
        for observer in observers:
            if observer is None:
                continue
            observer.stop()
            observer.join()


__all__ = ["ChangeWatcher", "DELETE_BATCH_SECONDS", "watch_patterns"]
