"""Tests for include_directories() add/remove and inline block creation."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from makelist_helper.manifest import EditOutcome, add_include_directory, remove_include_directory

ENTRY = "${CMAKE_CURRENT_SOURCE_DIR}/include"


class IncludeDirectoryTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        self.manifest = self.root / "CMakeLists.txt"
        self.include = self.root / "include"
        self.include.mkdir()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def write(self, text: str) -> None:
        self.manifest.write_text(text, encoding="utf-8")

    def read(self) -> str:
        return self.manifest.read_text(encoding="utf-8")

    def test_missing_block_is_created_after_project(self) -> None:
        self.write("project(Demo)\n\nadd_executable(demo main.cpp)\n")

        outcome = add_include_directory(self.manifest, self.include)

        self.assertEqual(outcome, EditOutcome.ADDED)
        self.assertEqual(
            self.read(),
            f"project(Demo)\n\ninclude_directories(\n    {ENTRY}\n)\n\nadd_executable(demo main.cpp)\n",
        )

    def test_missing_block_is_created_at_top_without_project(self) -> None:
        self.write("add_executable(demo main.cpp)\n")

        add_include_directory(self.manifest, self.include)

        self.assertEqual(self.read(), f"include_directories(\n    {ENTRY}\n)\n\nadd_executable(demo main.cpp)\n")

    def test_target_include_directories_does_not_count_as_block(self) -> None:
        self.write("project(Demo)\ntarget_include_directories(demo PRIVATE inc)\n")

        add_include_directory(self.manifest, self.include)

        self.assertEqual(
            self.read(),
            f"project(Demo)\n\ninclude_directories(\n    {ENTRY}\n)\ntarget_include_directories(demo PRIVATE inc)\n",
        )

    def test_add_is_idempotent(self) -> None:
        self.write(f"include_directories(\n    {ENTRY}\n)\n")

        self.assertEqual(add_include_directory(self.manifest, self.include), EditOutcome.ALREADY_PRESENT)
        self.assertEqual(self.read(), f"include_directories(\n    {ENTRY}\n)\n")

    def test_add_appends_after_existing_entries(self) -> None:
        other = self.root / "third_party" / "fmt"
        self.write(f"include_directories(\n    {ENTRY}\n)\n")

        add_include_directory(self.manifest, other)

        self.assertEqual(
            self.read(),
            f"include_directories(\n    {ENTRY}\n    ${{CMAKE_CURRENT_SOURCE_DIR}}/third_party/fmt\n)\n",
        )

    def test_remove_last_entry_keeps_block_shell(self) -> None:
        self.write(f"project(Demo)\ninclude_directories(\n    {ENTRY}\n)\n")

        self.assertEqual(remove_include_directory(self.manifest, self.include), EditOutcome.REMOVED)
        self.assertEqual(self.read(), "project(Demo)\ninclude_directories(\n)\n")

    def test_remove_reports_missing_block_and_entry(self) -> None:
        self.write("project(Demo)\n")
        self.assertEqual(remove_include_directory(self.manifest, self.include), EditOutcome.BLOCK_MISSING)

        self.write("include_directories(\n)\n")
        self.assertEqual(remove_include_directory(self.manifest, self.include), EditOutcome.NOT_PRESENT)


if __name__ == "__main__":
    unittest.main()
