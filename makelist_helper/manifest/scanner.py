"""Locate declaration blocks inside loosely structured manifest text.

The manifest is treated as plain text: a block is ``keyword(`` followed by a
body that ends at a closing parenthesis. Under ``FIRST_PAREN`` the body ends at
the first ``)``; under ``BALANCED`` nesting is tracked so entries such as
``$<$<CONFIG:Debug>:dbg.cpp>`` or ``foo(bar)`` stay inside the block.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from functools import lru_cache

from .types import (
    INCLUDE_DIRECTORIES_KEYWORD,
    PROJECT_KEYWORD,
    SET_KEYWORD,
    BlockStrictness,
    DeclarationBlock,
)


@lru_cache(maxsize=256)
def _named_header_re(keyword: str, name: str) -> re.Pattern[str]:
    # The group name must be followed by a space/tab or a line break.
    return re.compile(rf"(?<!\w){re.escape(keyword)}\(\s*{re.escape(name)}(?:[ \t]|\r?\n)")


@lru_cache(maxsize=32)
def _call_header_re(keyword: str) -> re.Pattern[str]:
    return re.compile(rf"(?<!\w){re.escape(keyword)}\(")


def _balanced_close(text: str, body_start: int) -> int:
    """Return the index of the ``)`` closing a body that starts at ``body_start``."""
    depth = 1
    idx = body_start
    length = len(text)
    while idx < length:
        ch = text[idx]
        if ch == '"':
            idx += 1
            while idx < length and text[idx] != '"':
                if text[idx] == "\\":
                    idx += 1
                idx += 1
        elif ch == "#":
            newline = text.find("\n", idx)
            if newline < 0:
                return -1
            idx = newline
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return idx
        idx += 1
    return -1


def find_body_end(text: str, body_start: int, strictness: BlockStrictness) -> int:
    """Return the index of the closing parenthesis, or ``-1`` when unterminated."""
    if strictness is BlockStrictness.BALANCED:
        return _balanced_close(text, body_start)
    return text.find(")", body_start)


def extract_entries(inner: str) -> tuple[str, ...]:
    """Split a block body into trimmed, non-empty lines in file order."""
    return tuple(line.strip() for line in inner.split("\n") if line.strip())


def _block_from_header(
    text: str,
    match: re.Match[str],
    keyword: str,
    name: str | None,
    strictness: BlockStrictness,
) -> DeclarationBlock | None:
    close = find_body_end(text, match.end(), strictness)
    if close < 0:
        return None
    inner = text[match.end():close]
    return DeclarationBlock(
        keyword=keyword,
        name=name,
        start=match.start(),
        end=close + 1,
        inner=inner,
        entries=extract_entries(inner),
    )


def find_named_block(
    text: str,
    keyword: str,
    name: str,
    strictness: BlockStrictness = BlockStrictness.FIRST_PAREN,
) -> DeclarationBlock | None:
    """Return the first ``keyword(name ...)`` block, or ``None`` when absent.

    Later blocks with the same name are never merged into the first.
    """
    for match in _named_header_re(keyword, name).finditer(text):
        block = _block_from_header(text, match, keyword, name, strictness)
        if block is not None:
            return block
    return None


def find_set_block(
    text: str,
    name: str,
    strictness: BlockStrictness = BlockStrictness.FIRST_PAREN,
) -> DeclarationBlock | None:
    return find_named_block(text, SET_KEYWORD, name, strictness)


def find_include_directories_block(
    text: str,
    strictness: BlockStrictness = BlockStrictness.FIRST_PAREN,
) -> DeclarationBlock | None:
    for match in _call_header_re(INCLUDE_DIRECTORIES_KEYWORD).finditer(text):
        block = _block_from_header(text, match, INCLUDE_DIRECTORIES_KEYWORD, None, strictness)
        if block is not None:
            return block
    return None


def iter_calls(
    text: str,
    keyword: str,
    strictness: BlockStrictness = BlockStrictness.FIRST_PAREN,
) -> Iterator[tuple[int, int]]:
    """Yield ``(start, end)`` spans of non-empty ``keyword(...)`` calls in order."""
    header_re = _call_header_re(keyword)
    pos = 0
    while True:
        match = header_re.search(text, pos)
        if match is None:
            return
        close = find_body_end(text, match.end(), strictness)
        if close < 0:
            return
        if close == match.end():
            pos = match.end()
            continue
        yield match.start(), close + 1
        pos = close + 1


def last_call_end(
    text: str,
    keyword: str,
    strictness: BlockStrictness = BlockStrictness.FIRST_PAREN,
) -> int | None:
    end: int | None = None
    for _start, call_end in iter_calls(text, keyword, strictness):
        end = call_end
    return end


def first_call_end(
    text: str,
    keyword: str,
    strictness: BlockStrictness = BlockStrictness.FIRST_PAREN,
) -> int | None:
    for _start, call_end in iter_calls(text, keyword, strictness):
        return call_end
    return None


def project_call_end(text: str, strictness: BlockStrictness = BlockStrictness.FIRST_PAREN) -> int | None:
    return first_call_end(text, PROJECT_KEYWORD, strictness)


__all__ = [
    "extract_entries",
    "find_body_end",
    "find_include_directories_block",
    "find_named_block",
    "find_set_block",
    "first_call_end",
    "iter_calls",
    "last_call_end",
    "project_call_end",
]
