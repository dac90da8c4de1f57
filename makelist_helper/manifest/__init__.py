"""Manifest text-patching engine.

Locates ``set()`` and ``include_directories()`` blocks in ``CMakeLists.txt``
text and edits their entries without touching the rest of the file.
"""

from __future__ import annotations

from .document import ManifestDocument, manifest_lock, read_manifest, write_manifest
from .engine import (
    add_entry,
    add_include_directory,
    create_blocks,
    include_entry,
    missing_blocks,
    quoted_entry,
    relative_entry_path,
    remove_entry,
    remove_include_directory,
    render_block,
)
from .scanner import extract_entries, find_include_directories_block, find_named_block, find_set_block
from .types import (
    BASE_DIR_PLACEHOLDER,
    MANIFEST_FILENAME,
    BlockStrictness,
    DeclarationBlock,
    EditOutcome,
)

__all__ = [
    "BASE_DIR_PLACEHOLDER",
    "BlockStrictness",
    "DeclarationBlock",
    "EditOutcome",
    "MANIFEST_FILENAME",
    "ManifestDocument",
    "add_entry",
    "add_include_directory",
    "create_blocks",
    "extract_entries",
    "find_include_directories_block",
    "find_named_block",
    "find_set_block",
    "include_entry",
    "manifest_lock",
    "missing_blocks",
    "quoted_entry",
    "read_manifest",
    "relative_entry_path",
    "remove_entry",
    "remove_include_directory",
    "render_block",
    "write_manifest",
]
