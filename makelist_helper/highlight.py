"""Terminal rendering of manifest text with Pygments.

Control bytes are neutralized before output so a manifest cannot move the
cursor or ring the bell.
"""

from __future__ import annotations

import re

from pygments import highlight as pygments_highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexers import CMakeLexer
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
DEFAULT_STYLE = "monokai"

_FORMATTERS: dict[str, Terminal256Formatter] = {}


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def _normalize_style(style: str) -> str:
    try:
        get_style_by_name(style)
    except ClassNotFound:
        return DEFAULT_STYLE
    return style


def _formatter_for_style(style: str) -> Terminal256Formatter:
    formatter = _FORMATTERS.get(style)
    if formatter is None:
        formatter = Terminal256Formatter(style=style)
        _FORMATTERS[style] = formatter
    return formatter


def render_manifest(text: str, style: str = DEFAULT_STYLE, no_color: bool = False) -> str:
    """Return ``text`` highlighted as CMake for a terminal."""
    safe = sanitize_terminal_text(text)
    if no_color:
        return safe
    rendered = pygments_highlight(safe, CMakeLexer(), _formatter_for_style(_normalize_style(style)))
    if not safe.endswith("\n") and rendered.endswith("\n"):
        rendered = rendered[:-1]
    return rendered


__all__ = ["DEFAULT_STYLE", "render_manifest", "sanitize_terminal_text"]
