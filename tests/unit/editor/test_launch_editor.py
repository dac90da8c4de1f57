"""Tests for opening files in the user's editor."""

from __future__ import annotations

import unittest
from pathlib import Path
from unittest import mock

from makelist_helper.editor import launch_editor


class LaunchEditorTests(unittest.TestCase):
    def test_runs_editor_command_with_target_last(self) -> None:
        target = Path("/work/CMakeLists.txt")

        with mock.patch.dict("os.environ", {"VISUAL": "", "EDITOR": "vim -p"}), mock.patch(
            "makelist_helper.editor.subprocess.run"
        ) as run:
            error = launch_editor(target)

        self.assertIsNone(error)
        run.assert_called_once_with(["vim", "-p", str(target)], check=False)

    def test_missing_editor_is_reported(self) -> None:
        with mock.patch.dict("os.environ", {"VISUAL": "", "EDITOR": ""}):
            self.assertEqual(launch_editor(Path("x")), "Cannot open: $EDITOR is not set.")

    def test_launch_failure_is_returned_as_message(self) -> None:
        with mock.patch.dict("os.environ", {"VISUAL": "nano"}), mock.patch(
            "makelist_helper.editor.subprocess.run", side_effect=OSError("no such file")
        ):
            self.assertEqual(launch_editor(Path("x")), "Failed to launch editor: no such file")


if __name__ == "__main__":
    unittest.main()
