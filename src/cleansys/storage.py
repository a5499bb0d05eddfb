"""JSON file storage for cleanup history."""

from __future__ import annotations

import json
import logging
from typing import Any

from cleansys.utils import xdg_data_home

log = logging.getLogger(__name__)

_DATA_DIR = xdg_data_home() / "cleansys"

HISTORY_FILE = _DATA_DIR / "history.json"


def _empty() -> dict[str, Any]:
    return {"sessions": []}


def load_history() -> dict[str, Any]:
    """Load the history file, returning an empty structure if missing or unreadable."""
    if not HISTORY_FILE.exists():
        return _empty()
    try:
        with open(HISTORY_FILE, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError):
        log.exception("Failed to load history file: %s", HISTORY_FILE)
        return _empty()
    if not isinstance(data, dict) or not isinstance(data.get("sessions"), list):
        log.warning("Ignoring malformed history file: %s", HISTORY_FILE)
        return _empty()
    return data


def save_history(data: dict[str, Any]) -> None:
    """Write the history data to disk."""
    try:
        _DATA_DIR.mkdir(parents=True, exist_ok=True)
        with open(HISTORY_FILE, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
    except OSError:
        log.exception("Failed to save history file: %s", HISTORY_FILE)
