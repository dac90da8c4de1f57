"""Idempotent insertion and removal of manifest entries.

Each operation re-reads the manifest, edits exactly one block span, and
writes the whole document back only when something changed. A missing block
is reported as ``EditOutcome.BLOCK_MISSING``; creating ``set()`` blocks is a
separate, explicit step (``create_blocks``) so callers can ask first.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path

from ..mapping import target_variable
from .document import manifest_lock, read_manifest, write_manifest
from .scanner import (
    find_include_directories_block,
    find_set_block,
    last_call_end,
    project_call_end,
)
from .types import (
    BASE_DIR_PLACEHOLDER,
    ENTRY_INDENT,
    INCLUDE_DIRECTORIES_KEYWORD,
    SET_KEYWORD,
    BlockStrictness,
    DeclarationBlock,
    EditOutcome,
)

logger = logging.getLogger(__name__)


def relative_entry_path(manifest_path: Path, target: Path) -> str:
    """Return ``target`` relative to the manifest directory with forward slashes."""
    return os.path.relpath(target, manifest_path.parent).replace("\\", "/")


def quoted_entry(manifest_path: Path, file_path: Path) -> str:
    return f'"{relative_entry_path(manifest_path, file_path)}"'


def include_entry(manifest_path: Path, directory: Path) -> str:
    return f"{BASE_DIR_PLACEHOLDER}/{relative_entry_path(manifest_path, directory)}"


def render_block(keyword: str, name: str | None, entries: Iterable[str]) -> str:
    """Render ``keyword(name`` then one indented entry per line, then ``)``."""
    header = f"{keyword}({name}" if name else f"{keyword}("
    body = "".join(f"{ENTRY_INDENT}{entry}\n" for entry in entries)
    return f"{header}\n{body})"


def splice_block(text: str, block: DeclarationBlock, replacement: str) -> str:
    return text[: block.start] + replacement + text[block.end:]


def _rewrite_entries(text: str, block: DeclarationBlock, entries: Iterable[str]) -> str:
    return splice_block(text, block, render_block(block.keyword, block.name, entries))


def add_entry(
    manifest_path: Path,
    file_path: Path,
    mapping: Mapping[str, str] | None,
    strictness: BlockStrictness = BlockStrictness.FIRST_PAREN,
) -> EditOutcome:
    """Append ``file_path`` to its ``set()`` block unless already listed."""
    entry = quoted_entry(manifest_path, file_path)
    name = target_variable(file_path, mapping)

    with manifest_lock(manifest_path):
        document = read_manifest(manifest_path)
        block = find_set_block(document.text, name, strictness)
        if block is None:
            logger.debug("set(%s) missing in %s", name, manifest_path)
            return EditOutcome.BLOCK_MISSING
        if entry in block.entries:
            return EditOutcome.ALREADY_PRESENT
        new_text = _rewrite_entries(document.text, block, [*block.entries, entry])
        write_manifest(document.with_text(new_text))

    logger.info("Added %s to set(%s) in %s", entry, name, manifest_path)
    return EditOutcome.ADDED


def remove_entry(
    manifest_path: Path,
    file_path: Path,
    mapping: Mapping[str, str] | None,
    strictness: BlockStrictness = BlockStrictness.FIRST_PAREN,
) -> EditOutcome:
    """Drop ``file_path`` from its ``set()`` block, keeping the emptied block."""
    entry = quoted_entry(manifest_path, file_path)
    name = target_variable(file_path, mapping)

    with manifest_lock(manifest_path):
        document = read_manifest(manifest_path)
        block = find_set_block(document.text, name, strictness)
        if block is None:
            return EditOutcome.BLOCK_MISSING
        if entry not in block.entries:
            return EditOutcome.NOT_PRESENT
        remaining = [line for line in block.entries if line != entry]
        write_manifest(document.with_text(_rewrite_entries(document.text, block, remaining)))

    logger.info("Removed %s from set(%s) in %s", entry, name, manifest_path)
    return EditOutcome.REMOVED


def missing_blocks(
    manifest_path: Path,
    files: Iterable[Path],
    mapping: Mapping[str, str] | None,
    strictness: BlockStrictness = BlockStrictness.FIRST_PAREN,
) -> list[str]:
    """Return declaration names needed by ``files`` with no block yet, first-seen order."""
    text = read_manifest(manifest_path).text
    missing: list[str] = []
    for file_path in files:
        name = target_variable(file_path, mapping)
        if name in missing:
            continue
        if find_set_block(text, name, strictness) is None:
            missing.append(name)
    return missing


def _block_insertion_point(text: str, strictness: BlockStrictness) -> tuple[int, str, str]:
    """Return ``(position, prefix, suffix)`` for new ``set()`` blocks."""
    after_set = last_call_end(text, SET_KEYWORD, strictness)
    if after_set is not None:
        return after_set, "\n\n", ""
    after_project = project_call_end(text, strictness)
    if after_project is not None:
        return after_project, "\n\n", ""
    return 0, "", "\n\n"


def create_blocks(
    manifest_path: Path,
    names: Iterable[str],
    strictness: BlockStrictness = BlockStrictness.FIRST_PAREN,
) -> list[str]:
    """Insert empty ``set(NAME\\n)`` blocks for names that have none.

    All new blocks land together after the last ``set(...)``, else after
    ``project(...)``, else at the top of the file. Returns the created names.
    """
    with manifest_lock(manifest_path):
        document = read_manifest(manifest_path)
        created: list[str] = []
        for name in names:
            if name in created or find_set_block(document.text, name, strictness) is not None:
                continue
            created.append(name)
        if not created:
            return []

        position, prefix, suffix = _block_insertion_point(document.text, strictness)
        new_blocks = "\n".join(f"{SET_KEYWORD}({name}\n)\n" for name in created)
        text = document.text
        write_manifest(document.with_text(text[:position] + prefix + new_blocks + suffix + text[position:]))

    logger.info("Created set() blocks %s in %s", ", ".join(created), manifest_path)
    return created


def add_include_directory(
    manifest_path: Path,
    directory: Path,
    strictness: BlockStrictness = BlockStrictness.FIRST_PAREN,
) -> EditOutcome:
    """Add ``directory`` to ``include_directories()``, creating the block if needed."""
    entry = include_entry(manifest_path, directory)

    with manifest_lock(manifest_path):
        document = read_manifest(manifest_path)
        text = document.text
        block = find_include_directories_block(text, strictness)
        if block is None:
            new_block = render_block(INCLUDE_DIRECTORIES_KEYWORD, None, [entry])
            after_project = project_call_end(text, strictness)
            if after_project is not None:
                new_text = text[:after_project] + "\n\n" + new_block + text[after_project:]
            else:
                new_text = new_block + "\n\n" + text
        elif entry in block.entries:
            return EditOutcome.ALREADY_PRESENT
        else:
            new_text = _rewrite_entries(text, block, [*block.entries, entry])
        write_manifest(document.with_text(new_text))

    logger.info("Added include directory %s to %s", entry, manifest_path)
    return EditOutcome.ADDED


def remove_include_directory(
    manifest_path: Path,
    directory: Path,
    strictness: BlockStrictness = BlockStrictness.FIRST_PAREN,
) -> EditOutcome:
    entry = include_entry(manifest_path, directory)

    with manifest_lock(manifest_path):
        document = read_manifest(manifest_path)
        block = find_include_directories_block(document.text, strictness)
        if block is None:
            return EditOutcome.BLOCK_MISSING
        if entry not in block.entries:
            return EditOutcome.NOT_PRESENT
        remaining = [line for line in block.entries if line != entry]
        write_manifest(document.with_text(_rewrite_entries(document.text, block, remaining)))

    logger.info("Removed include directory %s from %s", entry, manifest_path)
    return EditOutcome.REMOVED


__all__ = [
    "add_entry",
    "add_include_directory",
    "create_blocks",
    "include_entry",
    "missing_blocks",
    "quoted_entry",
    "relative_entry_path",
    "remove_entry",
    "remove_include_directory",
    "render_block",
    "splice_block",
]
