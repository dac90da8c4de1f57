"""Tests for layered settings loading and workspace seeding."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from makelist_helper.config import (
    DEFAULT_FILE_MAPPING,
    WORKSPACE_SETTINGS_FILENAME,
    ensure_workspace_defaults,
    load_settings,
    parse_strictness,
    read_json_object,
)
from makelist_helper.errors import ConfigurationError
from makelist_helper.manifest import BlockStrictness


class SettingsTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.base = Path(self._tmp.name).resolve()
        self.root = self.base / "ws"
        self.root.mkdir()
        self.user_config = self.base / "user" / "config.json"
        patcher = mock.patch("makelist_helper.config.CONFIG_PATH", self.user_config)
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _write(self, path: Path, data: object) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")

    def test_defaults_without_any_file(self) -> None:
        settings = load_settings(self.root)

        self.assertEqual(settings.file_mapping, DEFAULT_FILE_MAPPING)
        self.assertIn(".cpp", settings.supported_extensions)
        self.assertEqual(settings.block_strictness, BlockStrictness.FIRST_PAREN)

    def test_workspace_overrides_user_config(self) -> None:
        self._write(self.user_config, {"setFileMapping": {".cpp": "USER_SOURCES"}, "blockStrictness": "balanced"})
        self._write(self.root / WORKSPACE_SETTINGS_FILENAME, {"setFileMapping": {"CU": "CUDA_SOURCES"}})

        settings = load_settings(self.root)

        self.assertEqual(settings.file_mapping, {".cu": "CUDA_SOURCES"})
        self.assertEqual(settings.block_strictness, BlockStrictness.BALANCED)

    def test_malformed_json_falls_back_to_defaults(self) -> None:
        path = self.root / WORKSPACE_SETTINGS_FILENAME
        path.write_text("{not json", encoding="utf-8")

        self.assertEqual(read_json_object(path), {})
        self.assertEqual(load_settings(self.root).file_mapping, DEFAULT_FILE_MAPPING)

    def test_wrong_shape_is_configuration_error(self) -> None:
        self._write(self.root / WORKSPACE_SETTINGS_FILENAME, {"supportedExtensions": "cpp"})

        with self.assertRaises(ConfigurationError) as ctx:
            load_settings(self.root)
        self.assertIn("supportedExtensions", str(ctx.exception))

    def test_extensions_are_normalized(self) -> None:
        self._write(self.root / WORKSPACE_SETTINGS_FILENAME, {"supportedExtensions": ["CPP", ".h", "cpp", " "]})

        self.assertEqual(load_settings(self.root).supported_extensions, (".cpp", ".h"))

    def test_ensure_defaults_seeds_only_missing_keys(self) -> None:
        path = self.root / WORKSPACE_SETTINGS_FILENAME
        self._write(path, {"setFileMapping": {".cpp": "SRCS"}, "other": 1})

        seeded = ensure_workspace_defaults(self.root)

        self.assertEqual(seeded, ["supportedExtensions"])
        data = json.loads(path.read_text(encoding="utf-8"))
        self.assertEqual(data["setFileMapping"], {".cpp": "SRCS"})
        self.assertEqual(data["other"], 1)
        self.assertEqual(ensure_workspace_defaults(self.root), [])

    def test_parse_strictness_rejects_unknown_names(self) -> None:
        self.assertEqual(parse_strictness("Balanced"), BlockStrictness.BALANCED)
        with self.assertRaises(ConfigurationError):
            parse_strictness("loose")


if __name__ == "__main__":
    unittest.main()
