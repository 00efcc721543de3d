"""Read-only JSON settings file."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from zenscan.utils import xdg_config_home

log = logging.getLogger(__name__)

_SETTINGS_DIR = "zenscan"
_SETTINGS_FILE = "settings.json"


def default_settings_path() -> Path:
    return xdg_config_home() / _SETTINGS_DIR / _SETTINGS_FILE


class Settings:
    """Settings loaded from a JSON file the user edits by hand.

    Uses dot-notation keys for nested access:
        settings.get("scan.shred_passes")  # reads data["scan"]["shred_passes"]
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or default_settings_path()
        self._data: dict[str, Any] = {}
        self._load()

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key."""
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def _load(self) -> None:
        """Load settings from disk, gracefully handling errors."""
        if not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Could not load settings from %s: %s", self._path, e)
            return
        if isinstance(data, dict):
            self._data = data
        else:
            log.warning("Ignoring settings file %s: top level is not an object", self._path)
