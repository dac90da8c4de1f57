"""Blocking user-interaction surfaces: confirmations, pickers, messages.

Every call returns the chosen option or ``None`` when the user cancels, so
callers can abort before writing anything.
"""

from __future__ import annotations

import sys
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, TextIO

from .editor import launch_editor

INFO = "info"
WARNING = "warning"
ERROR = "error"

YES = "Yes"
NO = "No"
OPEN_MANIFEST = "Open CMakeLists.txt"
SELECT_ANOTHER = "Select Another"
SKIP = "Skip"


@dataclass(frozen=True)
class PickItem:
    """One choice shown by ``Prompter.pick``."""

    label: str
    description: str = ""
    value: object = None


class Prompter(Protocol):
    def notify(self, level: str, message: str, actions: Sequence[str] = ()) -> str | None:
        """Show ``message``; when ``actions`` are given return the chosen one."""

    def confirm(self, message: str, options: Sequence[str] = (YES, NO)) -> str | None:
        """Ask a question and return one of ``options`` or ``None``."""

    def pick(self, items: Sequence[PickItem], placeholder: str) -> PickItem | None:
        """Let the user choose one item, or ``None`` when cancelled."""

    def open_document(self, path: Path) -> str | None:
        """Open ``path`` for editing; return an error message on failure."""


class TerminalPrompter:
    """Line-oriented prompter over stdin/stdout.

    An empty answer or EOF cancels. Options may be chosen by number or by
    (case-insensitive) text. A shared lock keeps prompts raised from the
    watcher thread from interleaving with foreground prompts.
    """

    _lock = threading.RLock()

    def __init__(
        self,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        open_document: Callable[[Path], str | None] | None = None,
    ) -> None:
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._stderr = stderr or sys.stderr
        self._open_document = open_document or launch_editor

    def _write(self, text: str, stream: TextIO | None = None) -> None:
        target = stream or self._stdout
        target.write(text)
        target.flush()

    def _ask(self, prompt: str) -> str | None:
        self._write(prompt)
        line = self._stdin.readline()
        if not line:
            return None
        answer = line.strip()
        return answer or None

    def _choose(self, options: Sequence[str]) -> str | None:
        listing = "  ".join(f"[{idx}] {option}" for idx, option in enumerate(options, start=1))
        answer = self._ask(f"{listing}\n> ")
        if answer is None:
            return None
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            return options[int(answer) - 1]
        folded = answer.casefold()
        for option in options:
            if option.casefold() == folded or option.casefold().startswith(folded):
                return option
        return None

    def notify(self, level: str, message: str, actions: Sequence[str] = ()) -> str | None:
        with self._lock:
            stream = self._stderr if level in (WARNING, ERROR) else self._stdout
            prefix = "" if level == INFO else f"{level}: "
            self._write(f"{prefix}{message.strip()}\n", stream)
            if not actions:
                return None
            return self._choose(list(actions))

    def confirm(self, message: str, options: Sequence[str] = (YES, NO)) -> str | None:
        with self._lock:
            self._write(f"{message.strip()}\n")
            return self._choose(list(options))

    def pick(self, items: Sequence[PickItem], placeholder: str) -> PickItem | None:
        if not items:
            return None
        with self._lock:
            self._write(f"{placeholder}\n")
            for idx, item in enumerate(items, start=1):
                suffix = f"  ({item.description})" if item.description else ""
                self._write(f"  [{idx}] {item.label}{suffix}\n")
            answer = self._ask("> ")
            if answer is None or not answer.isdigit():
                return None
            choice = int(answer)
            if not 1 <= choice <= len(items):
                return None
            return items[choice - 1]

    def open_document(self, path: Path) -> str | None:
        with self._lock:
            return self._open_document(path)


class AutoPrompter:
    """Non-interactive prompter for automation.

    Confirms with the first option, picks the first (nearest) item, never
    opens documents, and forwards messages to ``sink``.
    """

    def __init__(self, sink: Callable[[str, str], None] | None = None) -> None:
        self._sink = sink
        self.messages: list[tuple[str, str]] = []

    def notify(self, level: str, message: str, actions: Sequence[str] = ()) -> str | None:
        self.messages.append((level, message.strip()))
        if self._sink is not None:
            self._sink(level, message.strip())
        return None

    def confirm(self, message: str, options: Sequence[str] = (YES, NO)) -> str | None:
        return options[0] if options else None

    def pick(self, items: Sequence[PickItem], placeholder: str) -> PickItem | None:
        return items[0] if items else None

    def open_document(self, path: Path) -> str | None:
        return None


__all__ = [
    "AutoPrompter",
    "ERROR",
    "INFO",
    "NO",
    "OPEN_MANIFEST",
    "PickItem",
    "Prompter",
    "SELECT_ANOTHER",
    "SKIP",
    "TerminalPrompter",
    "WARNING",
    "YES",
]
