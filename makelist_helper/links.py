"""Filename references inside manifest declaration blocks.

Quoted tokens inside ``keyword(NAME "a.cpp" "b.h")`` shapes are resolved to
workspace files. A token with one match links directly; several matches are
left for the user to choose from when the link is followed.
"""

from __future__ import annotations

import bisect
import logging
import re
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .debounce import DeferredTask
from .prompts import WARNING, PickItem, Prompter
from .workspace_files import collect_workspace_files, find_files_by_name, match_filename, to_project_relative

logger = logging.getLogger(__name__)

LINK_DEBOUNCE_SECONDS = 0.25

_DECLARATION_RE = re.compile(r"(?<!\w)[A-Za-z_]\w*\s*\(\s*\w+\s+((?:[\"'][^\"']+[\"']\s*)+)\)")
_QUOTED_RE = re.compile(r"[\"']([^\"']+?)[\"']")


@dataclass(frozen=True)
class FileReference:
    """A quoted filename token; ``start``/``end`` cover the text inside the quotes."""

    name: str
    start: int
    end: int
    line: int  # 1-based
    column: int  # 1-based


@dataclass(frozen=True)
class ManifestLink:
    reference: FileReference
    targets: tuple[Path, ...]

    @property
    def is_ambiguous(self) -> bool:
        return len(self.targets) > 1

    @property
    def target(self) -> Path | None:
        return self.targets[0] if len(self.targets) == 1 else None


def _line_starts(text: str) -> list[int]:
    starts = [0]
    for match in re.finditer("\n", text):
        starts.append(match.end())
    return starts


def scan_references(text: str) -> list[FileReference]:
    """Return every quoted filename token inside declaration blocks, in file order."""
    line_starts = _line_starts(text)
    references: list[FileReference] = []
    for block in _DECLARATION_RE.finditer(text):
        section_start = block.start(1)
        for token in _QUOTED_RE.finditer(block.group(1)):
            raw = token.group(1)
            name = raw.strip()
            if not name:
                continue
            start = section_start + token.start(1) + (len(raw) - len(raw.lstrip()))
            line_idx = bisect.bisect_right(line_starts, start) - 1
            references.append(
                FileReference(
                    name=name,
                    start=start,
                    end=start + len(name),
                    line=line_idx + 1,
                    column=start - line_starts[line_idx] + 1,
                )
            )
    return references


class ManifestLinkProvider:
    """Resolve manifest references, caching the result for unchanged content.

    ``request_links`` debounces rescans so editing bursts trigger one scan;
    a request superseded before the window closes is dropped.
    """

    def __init__(
        self,
        workspace_root: Path,
        delay_seconds: float = LINK_DEBOUNCE_SECONDS,
        collect_files: Callable[[Path], list[Path]] = collect_workspace_files,
    ) -> None:
        self.workspace_root = workspace_root.resolve()
        self._collect_files = collect_files
        self._lock = threading.Lock()
        self._last_text: str | None = None
        self._cached_links: list[ManifestLink] = []
        self._pending: tuple[str, Callable[[list[ManifestLink]], None], Callable[[], bool] | None] | None = None
        self._task = DeferredTask(delay_seconds, self._run_pending, name="makelist-helper-links")

    def cached_links(self, text: str) -> list[ManifestLink] | None:
        with self._lock:
            if self._last_text is not None and self._last_text == text:
                return list(self._cached_links)
        return None

    def links_for(self, text: str, cancelled: Callable[[], bool] | None = None) -> list[ManifestLink]:
        """Scan ``text`` now unless it matches the last scanned content."""
        cached = self.cached_links(text)
        if cached is not None:
            return cached

        references = scan_references(text)
        files = self._collect_files(self.workspace_root) if references else []
        links: list[ManifestLink] = []
        for reference in references:
            if cancelled is not None and cancelled():
                return []
            matches = match_filename(reference.name, files, self.workspace_root)
            logger.debug("Found %d matches for %s", len(matches), reference.name)
            if not matches:
                continue
            links.append(ManifestLink(reference=reference, targets=tuple(matches)))

        with self._lock:
            self._last_text = text
            self._cached_links = links
        logger.debug("Total links created: %d", len(links))
        return list(links)

    def request_links(
        self,
        text: str,
        on_ready: Callable[[list[ManifestLink]], None],
        cancelled: Callable[[], bool] | None = None,
    ) -> None:
        cached = self.cached_links(text)
        if cached is not None:
            on_ready(cached)
            return
        with self._lock:
            self._pending = (text, on_ready, cancelled)
        self._task.schedule()

    def _run_pending(self) -> None:
        with self._lock:
            pending = self._pending
            self._pending = None
        if pending is None:
            return
        text, on_ready, cancelled = pending
        if cancelled is not None and cancelled():
            on_ready([])
            return
        on_ready(self.links_for(text, cancelled))

    def dispose(self) -> None:
        self._task.cancel()
        with self._lock:
            self._pending = None


def resolve_link(link: ManifestLink, workspace_root: Path, prompter: Prompter) -> Path | None:
    """Return the link target, asking the user when several files match."""
    if not link.targets:
        return None
    if not link.is_ambiguous:
        return link.targets[0]
    items = [
        PickItem(label=to_project_relative(path, workspace_root.resolve()), description=str(path), value=path)
        for path in link.targets
    ]
    chosen = prompter.pick(items, f"Multiple files named {link.reference.name}")
    return chosen.value if chosen is not None else None


def open_file_by_name(name: str, manifest: Path, workspace_root: Path, prompter: Prompter) -> Path | None:
    """Open the file a manifest token refers to; returns the opened path."""
    direct = manifest.parent / name
    if direct.is_file():
        target: Path | None = direct
    else:
        root = workspace_root.resolve()
        matches = find_files_by_name(root, name)
        if not matches:
            prompter.notify(WARNING, f"File not found: {name}")
            return None
        reference = FileReference(name=name, start=0, end=len(name), line=1, column=1)
        target = resolve_link(ManifestLink(reference=reference, targets=tuple(matches)), root, prompter)
    if target is None:
        return None
    error = prompter.open_document(target)
    if error:
        prompter.notify(WARNING, error)
        return None
    return target


__all__ = [
    "FileReference",
    "LINK_DEBOUNCE_SECONDS",
    "ManifestLink",
    "ManifestLinkProvider",
    "open_file_by_name",
    "resolve_link",
    "scan_references",
]
