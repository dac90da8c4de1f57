"""Tests for terminal rendering of manifests."""

from __future__ import annotations

import unittest

from makelist_helper.highlight import render_manifest, sanitize_terminal_text

TEXT = 'project(Demo)\nset(SOURCES\n    "a.cpp"\n)\n'


class RenderManifestTests(unittest.TestCase):
    def test_no_color_returns_text_unchanged(self) -> None:
        self.assertEqual(render_manifest(TEXT, no_color=True), TEXT)

    def test_color_output_contains_ansi_sequences(self) -> None:
        rendered = render_manifest(TEXT)

        self.assertIn("\x1b[", rendered)
        self.assertIn("SOURCES", rendered)

    def test_unknown_style_falls_back(self) -> None:
        self.assertIn("\x1b[", render_manifest(TEXT, style="no-such-style"))

    def test_trailing_newline_is_not_added(self) -> None:
        self.assertFalse(render_manifest("set(A 1)").endswith("\n"))

    def test_control_bytes_are_escaped(self) -> None:
        self.assertEqual(sanitize_terminal_text("a\x07b\tc\n"), "a\\x07b\tc\n")
        self.assertEqual(render_manifest("set(A \x1b[2J)\n", no_color=True), "set(A \\x1b[2J)\n")


if __name__ == "__main__":
    unittest.main()
