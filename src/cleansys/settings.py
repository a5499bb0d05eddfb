"""Generic JSON-backed settings store."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from cleansys.utils import xdg_config_home

log = logging.getLogger(__name__)

_SETTINGS_DIR = "cleansys"
_SETTINGS_FILE = "settings.json"

_MISSING = object()

DEFAULTS: dict[str, Any] = {
    "scheduler": {
        "start_interval": 1.5,
        "run_duration": 2.0,
        "executor": "real",
    },
    "results": {
        "capacity": 1000,
    },
    "history": {
        "enabled": True,
    },
    "cleaner_paths": [],
}


def _lookup(data: dict[str, Any], key: str) -> Any:
    node: Any = data
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return _MISSING
        node = node[part]
    return node


class Settings:
    """Persistent settings backed by a JSON file.

    Uses dot-notation keys for nested access:
        settings.get("scheduler.run_duration")  # reads data["scheduler"]["run_duration"]
        settings.set("scheduler.executor", "simulated")  # writes + saves

    Keys missing from the file fall back to :data:`DEFAULTS` unless an
    explicit *default* is passed to :meth:`get`.
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

    def get(self, key: str, default: Any = _MISSING) -> Any:
        """Get a value by dot-notation key."""
        value = _lookup(self._data, key)
        if value is not _MISSING:
            return value
        if default is not _MISSING:
            return default
        fallback = _lookup(DEFAULTS, key)
        return None if fallback is _MISSING else fallback

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

    def _load(self) -> None:
        """Load settings from disk, gracefully handling errors."""
        if not self._path.exists():
            return
        try:
            self._data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Could not load settings from %s: %s", self._path, e)
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
