"""Cleaner that empties the user's trash."""

from __future__ import annotations

import logging
from pathlib import Path

from cleansys.models.cleaner import EntryCleaner
from cleansys.models.entry import FileEntry
from cleansys.utils import entry_for, xdg_data_home

log = logging.getLogger(__name__)


class TrashCleaner(EntryCleaner):
    """Empties the user's trash directory (~/.local/share/Trash)."""

    @property
    def id(self) -> str:
        return "trash"

    @property
    def name(self) -> str:
        return "Trash"

    @property
    def description(self) -> str:
        return "Empty trash folder"

    @property
    def sort_order(self) -> int:
        return 60

    def _trash_dir(self) -> Path:
        return xdg_data_home() / "Trash"

    @property
    def unavailable_reason(self) -> str | None:
        if not self._trash_dir().is_dir():
            return "Trash directory not found"
        return None

    def collect(self) -> list[FileEntry]:
        trash_dir = self._trash_dir()
        entries: list[FileEntry] = []
        for subdir in (trash_dir / "files", trash_dir / "info"):
            if not subdir.is_dir():
                continue
            for item in sorted(subdir.iterdir()):
                entry = entry_for(item, f"Trash: {item.name}")
                if entry is not None:
                    entries.append(entry)
        return entries
