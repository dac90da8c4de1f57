"""Editor launch helper for opening a manifest after an edit.

Runs ``$EDITOR`` on the target path and returns an error message string
instead of raising, so callers can report it like any other message.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


def launch_editor(target: Path) -> str | None:
    editor_env = os.environ.get("VISUAL", "").strip() or os.environ.get("EDITOR", "").strip()
    if not editor_env:
        return "Cannot open: $EDITOR is not set."
    cmd = shlex.split(editor_env)
    if not cmd:
        return "Cannot open: $EDITOR is empty."

    args = [*cmd, str(target)]
    logger.debug("Launching editor: %s", args)
    try:
        subprocess.run(args, check=False)
    except OSError as exc:
        return f"Failed to launch editor: {exc}"
    return None
