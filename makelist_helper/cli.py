"""Command-line front door for makelist-helper.

Parses subcommands, resolves workspace roots and settings, then dispatches
to the command handlers, the deletion watcher, or the reference resolver.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from collections.abc import Sequence
from pathlib import Path

from .commands import (
    add_include_directories,
    add_selected_files,
    remove_include_directories,
    remove_selected_files,
)
from .config import (
    Settings,
    ensure_workspace_defaults,
    load_settings,
    parse_strictness,
    workspace_settings_path,
)
from .errors import MakelistHelperError
from .highlight import DEFAULT_STYLE, render_manifest
from .links import ManifestLinkProvider, open_file_by_name
from .locator import normalized_workspace_roots, workspace_root_for
from .manifest import read_manifest
from .prompts import ERROR, INFO, WARNING, AutoPrompter, Prompter, TerminalPrompter
from .watcher import ChangeWatcher

logger = logging.getLogger("makelist_helper")

LOG_FORMAT = "[makelist-helper] %(levelname)s %(message)s"
EDIT_COMMANDS = {
    "add": add_selected_files,
    "remove": remove_selected_files,
    "add-dir": add_include_directories,
    "remove-dir": remove_include_directories,
}


def configure_logging(verbose: int) -> None:
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.handlers[:] = [handler]
    logger.setLevel(level)
    logger.propagate = False


def _print_message(level: str, message: str) -> None:
    stream = sys.stderr if level in (WARNING, ERROR) else sys.stdout
    prefix = "" if stream is sys.stdout else f"{level}: "
    stream.write(f"{prefix}{message}\n")


def _strictness_arg(value: str):
    """argparse type for ``--strictness`` values."""
    try:
        return parse_strictness(value)
    except MakelistHelperError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-w",
        "--workspace",
        action="append",
        type=Path,
        default=None,
        help="Workspace root bounding the manifest search (repeatable, default: current directory).",
    )
    common.add_argument("-y", "--yes", action="store_true", help="Answer prompts automatically and pick the nearest manifest.")
    common.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity.")
    common.add_argument(
        "--strictness",
        type=_strictness_arg,
        default=None,
        help="Block end detection: first-paren (default) or balanced.",
    )

    parser = argparse.ArgumentParser(
        prog="makelist-helper",
        description="Keep CMakeLists.txt source lists in sync with the file tree.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("add", "Add files to their set() blocks."),
        ("remove", "Remove files from their set() blocks."),
        ("add-dir", "Add directories to include_directories()."),
        ("remove-dir", "Remove directories from include_directories()."),
    ):
        sub = subparsers.add_parser(name, help=help_text, parents=[common])
        sub.add_argument("paths", nargs="+", type=Path, help="Primary target followed by any further selection.")
        sub.add_argument("-m", "--manifest", type=Path, default=None, help="Use this CMakeLists.txt instead of asking.")

    subparsers.add_parser("watch", help="Offer to prune entries when managed files are deleted.", parents=[common])
    subparsers.add_parser("init", help="Seed workspace settings with defaults.", parents=[common])

    links = subparsers.add_parser("links", help="List filename references in a manifest.", parents=[common])
    links.add_argument("manifest", type=Path)

    open_parser = subparsers.add_parser("open", help="Open a file referenced by a manifest.", parents=[common])
    open_parser.add_argument("name")
    open_parser.add_argument("-m", "--manifest", type=Path, required=True)

    show = subparsers.add_parser("show", help="Print a manifest with syntax highlighting.", parents=[common])
    show.add_argument("manifest", type=Path)
    show.add_argument("--style", default=DEFAULT_STYLE, help="Pygments style name.")
    show.add_argument("--no-color", action="store_true", help="Disable color output.")
    return parser


def _settings_for(root: Path, strictness) -> Settings:
    settings = load_settings(root)
    if strictness is None:
        return settings
    return Settings(
        file_mapping=settings.file_mapping,
        supported_extensions=settings.supported_extensions,
        block_strictness=strictness,
    )


def _run_watch(roots: list[Path], root: Path, strictness, prompter: Prompter) -> int:
    watcher = ChangeWatcher(roots, _settings_for(root, strictness), prompter)
    watcher.start()
    watcher.watch_settings(workspace_settings_path(root), lambda: _settings_for(root, strictness))
    try:
        while True:
            time.sleep(1.0)
    except KeyboardInterrupt:
        pass
    finally:
        watcher.dispose()
    return 0


def _run_links(manifest: Path, root: Path) -> int:
    manifest = manifest.resolve()
    provider = ManifestLinkProvider(root)
    for link in provider.links_for(read_manifest(manifest).text):
        ref = link.reference
        if link.is_ambiguous:
            target = f"{len(link.targets)} matches"
        else:
            target = str(link.targets[0])
        sys.stdout.write(f"{manifest}:{ref.line}:{ref.column}: {ref.name} -> {target}\n")
    return 0


def run(args: argparse.Namespace, prompter: Prompter) -> int:
    roots = normalized_workspace_roots(args.workspace or [Path.cwd()])
    if not roots:
        raise SystemExit("No usable workspace root.")

    paths: list[Path] = [path.resolve() for path in getattr(args, "paths", [])]
    anchor = paths[0] if paths else Path.cwd()
    if getattr(args, "manifest", None) is not None:
        anchor = args.manifest.resolve()
    root = workspace_root_for(anchor, roots) or roots[0]

    if args.command == "init":
        seeded = ensure_workspace_defaults(root)
        if seeded:
            prompter.notify(INFO, f"Seeded {', '.join(seeded)} in {workspace_settings_path(root)}")
        else:
            prompter.notify(INFO, "Workspace settings already exist.")
        return 0
    if args.command == "show":
        sys.stdout.write(render_manifest(read_manifest(args.manifest).text, args.style, args.no_color))
        return 0
    if args.command == "links":
        return _run_links(args.manifest, root)
    if args.command == "open":
        opened = open_file_by_name(args.name, args.manifest.resolve(), root, prompter)
        return 0 if opened is not None else 1

    ensure_workspace_defaults(root)
    if args.command == "watch":
        return _run_watch(roots, root, args.strictness, prompter)

    handler = EDIT_COMMANDS[args.command]
    settings = _settings_for(root, args.strictness)
    selected = paths if len(paths) > 1 else None
    handler(paths[0], selected, settings, roots, prompter, args.manifest)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    prompter: Prompter = AutoPrompter(sink=_print_message) if args.yes else TerminalPrompter()
    try:
        return run(args, prompter)
    except MakelistHelperError as exc:
        prompter.notify(ERROR, str(exc))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
