"""Tests for manifest filename references and their resolution."""

from __future__ import annotations

import tempfile
import threading
import unittest
from pathlib import Path

from makelist_helper.links import (
    ManifestLinkProvider,
    open_file_by_name,
    resolve_link,
    scan_references,
)
from makelist_helper.prompts import WARNING
from makelist_helper.workspace_files import collect_workspace_files, match_filename


class RecordingPrompter:
    def __init__(self, pick_index=0) -> None:
        self.pick_index = pick_index
        self.messages = []
        self.picked_from = []
        self.opened = []

    def notify(self, level, message, actions=()):
        self.messages.append((level, message))
        return None

    def confirm(self, message, options=()):
        return None

    def pick(self, items, placeholder):
        self.picked_from.append((placeholder, [item.label for item in items]))
        return items[self.pick_index] if self.pick_index < len(items) else None

    def open_document(self, path):
        self.opened.append(path)
        return None


class ScanReferencesTests(unittest.TestCase):
    def test_positions_point_inside_quotes(self) -> None:
        text = 'project(Demo)\nset(SOURCES\n    "src/a.cpp"\n    \'b.h\'\n)\n'

        refs = scan_references(text)

        self.assertEqual([ref.name for ref in refs], ["src/a.cpp", "b.h"])
        self.assertEqual((refs[0].line, refs[0].column), (3, 6))
        self.assertEqual(text[refs[0].start:refs[0].end], "src/a.cpp")
        self.assertEqual((refs[1].line, refs[1].column), (4, 6))

    def test_unquoted_and_nameless_calls_are_ignored(self) -> None:
        text = "add_executable(demo main.cpp)\nmessage(\"hello\")\n"

        self.assertEqual(scan_references(text), [])


class LinkProviderTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        self.files = [self.root / "src" / "a.cpp", self.root / "lib" / "src" / "a.cpp", self.root / "b.h"]
        self.collect_calls = 0

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def collect(self, root: Path) -> list[Path]:
        self.collect_calls += 1
        return list(self.files)

    def test_links_single_and_ambiguous_matches(self) -> None:
        provider = ManifestLinkProvider(self.root, collect_files=self.collect)

        links = provider.links_for('set(SOURCES "src/a.cpp" "b.h" "missing.cpp")')

        self.assertEqual(len(links), 2)
        self.assertTrue(links[0].is_ambiguous)
        self.assertIsNone(links[0].target)
        self.assertEqual(links[1].target, self.root / "b.h")

    def test_unchanged_text_reuses_cached_links(self) -> None:
        provider = ManifestLinkProvider(self.root, collect_files=self.collect)
        text = 'set(HEADERS "b.h")'

        first = provider.links_for(text)
        second = provider.links_for(text)

        self.assertEqual(first, second)
        self.assertEqual(self.collect_calls, 1)
        self.assertIsNone(provider.cached_links('set(HEADERS "c.h")'))

    def test_cancelled_scan_returns_nothing(self) -> None:
        provider = ManifestLinkProvider(self.root, collect_files=self.collect)

        self.assertEqual(provider.links_for('set(HEADERS "b.h")', cancelled=lambda: True), [])

    def test_superseded_request_never_fires(self) -> None:
        provider = ManifestLinkProvider(self.root, delay_seconds=0.05, collect_files=self.collect)
        self.addCleanup(provider.dispose)
        results = []
        done = threading.Event()

        provider.request_links('set(HEADERS "x.h")', lambda links: results.append(("old", links)))

        def on_ready(links) -> None:
            results.append(("new", links))
            done.set()

        provider.request_links('set(HEADERS "b.h")', on_ready)

        self.assertTrue(done.wait(2.0))
        self.assertEqual([tag for tag, _ in results], ["new"])
        self.assertEqual(results[0][1][0].target, self.root / "b.h")

    def test_ambiguous_link_asks_user(self) -> None:
        provider = ManifestLinkProvider(self.root, collect_files=self.collect)
        link = provider.links_for('set(SOURCES "src/a.cpp")')[0]
        prompter = RecordingPrompter(pick_index=1)

        chosen = resolve_link(link, self.root, prompter)

        self.assertEqual(chosen, self.root / "lib" / "src" / "a.cpp")
        self.assertEqual(prompter.picked_from[0], ("Multiple files named src/a.cpp", ["src/a.cpp", "lib/src/a.cpp"]))


class WorkspaceFilesTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        for relative in ("src/a.cpp", "lib/xsrc/a.cpp", "node_modules/pkg/a.cpp", ".git/a.cpp", "CMakeLists.txt"):
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("", encoding="utf-8")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_collect_skips_hidden_and_node_modules(self) -> None:
        files = collect_workspace_files(self.root)

        self.assertEqual(
            [path.relative_to(self.root).as_posix() for path in files],
            ["CMakeLists.txt", "lib/xsrc/a.cpp", "src/a.cpp"],
        )

    def test_match_requires_whole_path_components(self) -> None:
        files = collect_workspace_files(self.root)

        self.assertEqual(match_filename("./src/a.cpp", files, self.root), [self.root / "src" / "a.cpp"])
        self.assertEqual(len(match_filename("a.cpp", files, self.root)), 2)

    def test_open_prefers_file_next_to_manifest(self) -> None:
        prompter = RecordingPrompter()

        opened = open_file_by_name("src/a.cpp", self.root / "CMakeLists.txt", self.root, prompter)

        self.assertEqual(opened, self.root / "src" / "a.cpp")
        self.assertEqual(prompter.opened, [self.root / "src" / "a.cpp"])

    def test_open_unknown_name_warns(self) -> None:
        prompter = RecordingPrompter()

        self.assertIsNone(open_file_by_name("nope.cpp", self.root / "CMakeLists.txt", self.root, prompter))
        self.assertEqual(prompter.messages, [(WARNING, "File not found: nope.cpp")])


if __name__ == "__main__":
    unittest.main()
