"""Datatypes and constants shared by the manifest scanner and engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

MANIFEST_FILENAME = "CMakeLists.txt"
SET_KEYWORD = "set"
INCLUDE_DIRECTORIES_KEYWORD = "include_directories"
PROJECT_KEYWORD = "project"
BASE_DIR_PLACEHOLDER = "${CMAKE_CURRENT_SOURCE_DIR}"
ENTRY_INDENT = "    "


class BlockStrictness(Enum):
    """How the end of a block body is found."""

    # Body ends at the first ``)`` after the header.
    FIRST_PAREN = "first-paren"
    # Nested parentheses are tracked; quoted strings and comments are skipped.
    BALANCED = "balanced"


class EditOutcome(Enum):
    """Result of one add/remove request against a manifest."""

    ADDED = "added"
    REMOVED = "removed"
    ALREADY_PRESENT = "already present"
    NOT_PRESENT = "not present"
    BLOCK_MISSING = "block missing"

    @property
    def changed(self) -> bool:
        return self in (EditOutcome.ADDED, EditOutcome.REMOVED)


@dataclass(frozen=True)
class DeclarationBlock:
    """One located ``keyword(name ...)`` region of a manifest.

    ``start``/``end`` delimit the whole block including the closing
    parenthesis; ``inner`` is the raw body between the header and that
    parenthesis. ``name`` is ``None`` for unnamed blocks such as
    ``include_directories``.
    """

    keyword: str
    name: str | None
    start: int
    end: int
    inner: str
    entries: tuple[str, ...]


__all__ = [
    "BASE_DIR_PLACEHOLDER",
    "BlockStrictness",
    "DeclarationBlock",
    "ENTRY_INDENT",
    "EditOutcome",
    "INCLUDE_DIRECTORIES_KEYWORD",
    "MANIFEST_FILENAME",
    "PROJECT_KEYWORD",
    "SET_KEYWORD",
]
