"""Command handlers behind the add/remove file and directory commands.

Handlers collect the selection, pick a manifest nearest-first, ask before
creating missing ``set()`` blocks, run per-file edits independently and
report a tally. Writes only happen after every confirmation is answered.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Collection, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from .config import Settings
from .locator import directory_for_selection, find_manifests
from .manifest import (
    EditOutcome,
    add_entry,
    add_include_directory,
    create_blocks,
    missing_blocks,
    remove_entry,
    remove_include_directory,
)
from .mapping import filter_managed
from .prompts import ERROR, INFO, OPEN_MANIFEST, WARNING, YES, PickItem, Prompter

logger = logging.getLogger(__name__)


@dataclass
class BatchReport:
    """Per-path outcomes of one command against one manifest."""

    manifest: Path
    outcomes: dict[Path, EditOutcome] = field(default_factory=dict)

    @property
    def changed(self) -> list[Path]:
        return [path for path, outcome in self.outcomes.items() if outcome.changed]

    @property
    def unchanged(self) -> list[Path]:
        return [path for path, outcome in self.outcomes.items() if not outcome.changed]


def manifest_label(manifest: Path, start: Path) -> str:
    return os.path.relpath(manifest, directory_for_selection(start))


def select_manifest(
    start: Path,
    workspace_roots: Sequence[Path],
    prompter: Prompter,
    preselected: Path | None = None,
    exclude: Collection[Path] = (),
) -> Path | None:
    """Pick the target manifest among those above ``start``, nearest first.

    Manifests in ``exclude`` are not offered again.
    """
    if preselected is not None:
        return preselected.resolve()
    found = find_manifests(start, workspace_roots)
    manifests = [manifest for manifest in found if manifest not in exclude]
    if not manifests:
        if found:
            prompter.notify(WARNING, "No other CMakeLists.txt found.")
        else:
            prompter.notify(ERROR, "No CMakeLists.txt found!")
        return None
    items = [
        PickItem(label=manifest_label(manifest, start), description=str(manifest), value=manifest)
        for manifest in manifests
    ]
    chosen = prompter.pick(items, "Select CMakeLists.txt")
    if chosen is None:
        return None
    return chosen.value if isinstance(chosen.value, Path) else Path(chosen.description)


def offer_open(prompter: Prompter, level: str, message: str, manifest: Path) -> None:
    """Report ``message`` and open the manifest if the user asks for it."""
    action = prompter.notify(level, message, [OPEN_MANIFEST])
    if action != OPEN_MANIFEST:
        return
    error = prompter.open_document(manifest)
    if error:
        prompter.notify(ERROR, error)


def _plural(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


def add_selected_files(
    primary: Path,
    selected: Sequence[Path] | None,
    settings: Settings,
    workspace_roots: Sequence[Path],
    prompter: Prompter,
    manifest: Path | None = None,
) -> BatchReport | None:
    """Add the selected managed files to their ``set()`` blocks."""
    files = list(selected) if selected else [primary]
    selection = filter_managed(files, settings.file_mapping)
    if selection is None:
        prompter.notify(WARNING, "No files with mapped extensions were selected.")
        return None

    first = selection.paths[0]
    target = select_manifest(first, workspace_roots, prompter, manifest)
    if target is None:
        return None
    label = manifest_label(target, first)

    missing = missing_blocks(target, selection.paths, selection.mapping, settings.block_strictness)
    if missing:
        answer = prompter.confirm(
            f"The following set() blocks are missing in {label}: {', '.join(missing)}. Create them?"
        )
        if answer != YES:
            logger.debug("Block creation declined for %s", target)
            return None
        create_blocks(target, missing, settings.block_strictness)

    report = BatchReport(manifest=target)
    for path in selection.paths:
        report.outcomes[path] = add_entry(target, path, selection.mapping, settings.block_strictness)

    added = report.changed
    present = report.unchanged
    if len(selection.paths) == 1:
        name = selection.paths[0].name
        if added:
            offer_open(prompter, INFO, f"Added {name} to {label}", target)
        else:
            offer_open(prompter, WARNING, f"File {name} already in {label}", target)
        return report

    parts = []
    if added:
        parts.append(f"Added {_plural(len(added), 'file', 'files')} to {label}.")
    if present:
        parts.append(f"{_plural(len(present), 'file was', 'files were')} already present.")
    offer_open(prompter, INFO if added else WARNING, " ".join(parts), target)
    return report


def remove_selected_files(
    primary: Path,
    selected: Sequence[Path] | None,
    settings: Settings,
    workspace_roots: Sequence[Path],
    prompter: Prompter,
    manifest: Path | None = None,
) -> BatchReport | None:
    """Remove the selected managed files from their ``set()`` blocks."""
    files = list(selected) if selected else [primary]
    selection = filter_managed(files, settings.file_mapping)
    if selection is None:
        prompter.notify(WARNING, "No files with mapped extensions were selected.")
        return None

    first = selection.paths[0]
    target = select_manifest(first, workspace_roots, prompter, manifest)
    if target is None:
        return None
    label = manifest_label(target, first)

    report = BatchReport(manifest=target)
    for path in selection.paths:
        report.outcomes[path] = remove_entry(target, path, selection.mapping, settings.block_strictness)

    removed = report.changed
    not_found = report.unchanged
    parts = []
    if removed:
        parts.append(f"Removed {_plural(len(removed), 'file', 'files')} from {label}.")
    if not_found:
        parts.append(f"{_plural(len(not_found), 'file was', 'files were')} not found.")
    offer_open(prompter, INFO if removed else WARNING, " ".join(parts), target)
    return report


def _selected_directories(primary: Path, selected: Sequence[Path] | None) -> list[Path]:
    directories: list[Path] = []
    for path in list(selected) if selected else [primary]:
        directory = directory_for_selection(path)
        if directory not in directories:
            directories.append(directory)
    return directories


def _edit_include_directories(
    primary: Path,
    selected: Sequence[Path] | None,
    settings: Settings,
    workspace_roots: Sequence[Path],
    prompter: Prompter,
    manifest: Path | None,
    edit: Callable[..., EditOutcome],
    verb: str,
    negative: str,
) -> BatchReport | None:
    directories = _selected_directories(primary, selected)
    target = select_manifest(directories[0], workspace_roots, prompter, manifest)
    if target is None:
        return None
    label = manifest_label(target, directories[0])

    report = BatchReport(manifest=target)
    for directory in directories:
        report.outcomes[directory] = edit(target, directory, settings.block_strictness)

    changed = report.changed
    unchanged = report.unchanged
    parts = []
    if changed:
        parts.append(f"{verb} {_plural(len(changed), 'include directory', 'include directories')} in {label}.")
    if unchanged:
        parts.append(f"{_plural(len(unchanged), 'directory was', 'directories were')} {negative}.")
    offer_open(prompter, INFO if changed else WARNING, " ".join(parts), target)
    return report


def add_include_directories(
    primary: Path,
    selected: Sequence[Path] | None,
    settings: Settings,
    workspace_roots: Sequence[Path],
    prompter: Prompter,
    manifest: Path | None = None,
) -> BatchReport | None:
    """Add selected directories (or the parents of selected files) to ``include_directories()``."""
    return _edit_include_directories(
        primary,
        selected,
        settings,
        workspace_roots,
        prompter,
        manifest,
        add_include_directory,
        "Added",
        "already present",
    )


def remove_include_directories(
    primary: Path,
    selected: Sequence[Path] | None,
    settings: Settings,
    workspace_roots: Sequence[Path],
    prompter: Prompter,
    manifest: Path | None = None,
) -> BatchReport | None:
    return _edit_include_directories(
        primary,
        selected,
        settings,
        workspace_roots,
        prompter,
        manifest,
        remove_include_directory,
        "Removed",
        "not found",
    )


__all__ = [
    "BatchReport",
    "add_include_directories",
    "add_selected_files",
    "manifest_label",
    "offer_open",
    "remove_include_directories",
    "remove_selected_files",
    "select_manifest",
]
