"""Layered JSON settings for manifest editing.

Defaults are overridden by the per-user config file, which is overridden by the
workspace settings file. Unreadable or malformed files fall back to empty,
but a present key with the wrong shape is reported as a configuration error.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

from .errors import ConfigurationError
from .manifest.types import BlockStrictness

logger = logging.getLogger(__name__)

APP_NAME = "makelist-helper"
CONFIG_FILENAME = "config.json"
WORKSPACE_SETTINGS_FILENAME = ".makelist-helper.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH

FILE_MAPPING_KEY = "setFileMapping"
SUPPORTED_EXTENSIONS_KEY = "supportedExtensions"
BLOCK_STRICTNESS_KEY = "blockStrictness"

DEFAULT_FILE_MAPPING: dict[str, str] = {
    ".h": "HEADERS",
    ".hpp": "HEADERS",
    ".hxx": "HEADERS",
    ".cpp": "SOURCES",
    ".cxx": "SOURCES",
    ".cc": "SOURCES",
}
DEFAULT_SUPPORTED_EXTENSIONS: list[str] = [".cpp", ".hpp", ".h", ".hxx", ".cxx", ".cc"]

_STRICTNESS_NAMES = {
    "first-paren": BlockStrictness.FIRST_PAREN,
    "balanced": BlockStrictness.BALANCED,
}


@dataclass(frozen=True)
class Settings:
    """Settings snapshot loaded once per top-level operation."""

    file_mapping: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_FILE_MAPPING))
    supported_extensions: tuple[str, ...] = tuple(DEFAULT_SUPPORTED_EXTENSIONS)
    block_strictness: BlockStrictness = BlockStrictness.FIRST_PAREN


def workspace_settings_path(workspace_root: Path) -> Path:
    return workspace_root / WORKSPACE_SETTINGS_FILENAME


def read_json_object(path: Path) -> dict[str, object]:
    """Load a top-level JSON object, returning ``{}`` when missing or malformed."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except Exception as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def write_json_object(path: Path, data: dict[str, object]) -> bool:
    """Persist ``data`` as pretty-printed JSON; return whether it was written."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.error("Failed to update settings %s: %s", path, exc)
        return False
    return True


def _parse_file_mapping(value: object) -> dict[str, str]:
    if not isinstance(value, dict):
        raise ConfigurationError(f"{FILE_MAPPING_KEY} must be an object of extension -> set() name.")
    mapping: dict[str, str] = {}
    for raw_ext, raw_name in value.items():
        if not isinstance(raw_ext, str) or not isinstance(raw_name, str) or not raw_name.strip():
            raise ConfigurationError(f"Invalid {FILE_MAPPING_KEY} entry: {raw_ext!r} -> {raw_name!r}")
        ext = raw_ext.strip().lower()
        if not ext.startswith("."):
            ext = "." + ext
        mapping[ext] = raw_name.strip()
    return mapping


def _parse_supported_extensions(value: object) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigurationError(f"{SUPPORTED_EXTENSIONS_KEY} must be an array of strings.")
    extensions: list[str] = []
    for item in value:
        ext = item.strip().lower()
        if not ext:
            continue
        if not ext.startswith("."):
            ext = "." + ext
        if ext not in extensions:
            extensions.append(ext)
    return tuple(extensions)


def _parse_strictness(value: object) -> BlockStrictness:
    if isinstance(value, str) and value.strip().lower() in _STRICTNESS_NAMES:
        return _STRICTNESS_NAMES[value.strip().lower()]
    choices = ", ".join(sorted(_STRICTNESS_NAMES))
    raise ConfigurationError(f"{BLOCK_STRICTNESS_KEY} must be one of: {choices}.")


def parse_strictness(value: str) -> BlockStrictness:
    """Resolve a strictness name such as ``"balanced"``."""
    return _parse_strictness(value)


def load_settings(workspace_root: Path | None = None) -> Settings:
    """Merge defaults, user config and workspace settings into ``Settings``."""
    merged: dict[str, object] = {
        FILE_MAPPING_KEY: dict(DEFAULT_FILE_MAPPING),
        SUPPORTED_EXTENSIONS_KEY: list(DEFAULT_SUPPORTED_EXTENSIONS),
        BLOCK_STRICTNESS_KEY: "first-paren",
    }
    layers = [CONFIG_PATH]
    if workspace_root is not None:
        layers.append(workspace_settings_path(workspace_root))
    for layer in layers:
        data = read_json_object(layer)
        for key in (FILE_MAPPING_KEY, SUPPORTED_EXTENSIONS_KEY, BLOCK_STRICTNESS_KEY):
            if key in data:
                merged[key] = data[key]

    return Settings(
        file_mapping=_parse_file_mapping(merged[FILE_MAPPING_KEY]),
        supported_extensions=_parse_supported_extensions(merged[SUPPORTED_EXTENSIONS_KEY]),
        block_strictness=_parse_strictness(merged[BLOCK_STRICTNESS_KEY]),
    )


def ensure_workspace_defaults(workspace_root: Path) -> list[str]:
    """Seed missing workspace settings with defaults and return the seeded keys."""
    path = workspace_settings_path(workspace_root)
    data = read_json_object(path)
    defaults: dict[str, object] = {
        FILE_MAPPING_KEY: dict(DEFAULT_FILE_MAPPING),
        SUPPORTED_EXTENSIONS_KEY: list(DEFAULT_SUPPORTED_EXTENSIONS),
    }
    seeded: list[str] = []
    for key, default in defaults.items():
        if data.get(key):
            continue
        logger.info("No workspace setting found for %s, creating from defaults: %s", key, default)
        data[key] = default
        seeded.append(key)
    if seeded and not write_json_object(path, data):
        return []
    return seeded


__all__ = [
    "BLOCK_STRICTNESS_KEY",
    "CONFIG_PATH",
    "DEFAULT_FILE_MAPPING",
    "DEFAULT_SUPPORTED_EXTENSIONS",
    "FILE_MAPPING_KEY",
    "SUPPORTED_EXTENSIONS_KEY",
    "Settings",
    "WORKSPACE_SETTINGS_FILENAME",
    "ensure_workspace_defaults",
    "load_settings",
    "parse_strictness",
    "read_json_object",
    "workspace_settings_path",
    "write_json_object",
]
