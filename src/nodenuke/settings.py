"""JSON-backed user settings."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from nodenuke.core.scanner import DEFAULT_TARGET_NAME, DEFAULT_WORKERS
from nodenuke.utils import xdg_config_home

log = logging.getLogger(__name__)

_SETTINGS_DIR = "nodenuke"
_SETTINGS_FILE = "settings.json"

TARGET_NAME_KEY = "scan.target_name"
WORKERS_KEY = "scan.workers"
TICK_MS_KEY = "ui.tick_ms"
CONFIRM_KEY = "ui.confirm_before_deleting"

DEFAULT_TICK_MS = 80


class Settings:
    """Persistent settings backed by a JSON file.

    Uses dot-notation keys for nested access:
        settings.get("scan.workers")  # reads data["scan"]["workers"]
        settings.set("scan.workers", 8)  # writes + saves
    """

    _instance: Settings | None = None

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or (xdg_config_home() / _SETTINGS_DIR / _SETTINGS_FILE)
        self._data: dict[str, Any] = {}
        self._load()

    @classmethod
    def instance(cls) -> Settings:
        """Return the singleton settings instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key."""
        parts = key.split(".")
        node: Any = self._data
        for part in parts:
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a value by dot-notation key and persist to disk."""
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            if part not in node or not isinstance(node[part], dict):
                node[part] = {}
            node = node[part]
        node[parts[-1]] = value
        self._save()

    # -- Typed accessors --

    def target_name(self) -> str:
        value = self.get(TARGET_NAME_KEY, DEFAULT_TARGET_NAME)
        if not isinstance(value, str) or not value or "/" in value or "\\" in value:
            log.warning("Ignoring invalid %s: %r", TARGET_NAME_KEY, value)
            return DEFAULT_TARGET_NAME
        return value

    def workers(self) -> int:
        return self._positive_int(WORKERS_KEY, DEFAULT_WORKERS)

    def tick_seconds(self) -> float:
        return self._positive_int(TICK_MS_KEY, DEFAULT_TICK_MS) / 1000

    def confirm_before_deleting(self) -> bool:
        return bool(self.get(CONFIRM_KEY, True))

    def _positive_int(self, key: str, default: int) -> int:
        value = self.get(key, default)
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            log.warning("Ignoring invalid %s: %r", key, value)
            return default
        return value

    def _load(self) -> None:
        """Load settings from disk, gracefully handling errors."""
        if not self._path.exists():
            return
        try:
            self._data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Could not load settings from %s: %s", self._path, e)
            self._data = {}
            return
        if not isinstance(self._data, dict):
            log.warning("Ignoring settings in %s: not a JSON object", self._path)
            self._data = {}

    def _save(self) -> None:
        """Persist settings to disk."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(self._data, indent=2, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
        except OSError as e:
            log.warning("Could not save settings to %s: %s", self._path, e)
