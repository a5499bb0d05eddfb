"""Cleaner for per-user package manager caches (pip, npm, cargo, yarn)."""

from __future__ import annotations

import logging
from pathlib import Path

from cleansys.models.cleaner import EntryCleaner
from cleansys.models.entry import FileEntry
from cleansys.utils import entry_for, xdg_cache_home

log = logging.getLogger(__name__)


def _cache_locations() -> list[tuple[str, Path]]:
    home = Path.home()
    return [
        ("pip", xdg_cache_home() / "pip"),
        ("npm", home / ".npm" / "_cacache"),
        ("cargo", home / ".cargo" / "registry" / "cache"),
        ("yarn", xdg_cache_home() / "yarn"),
    ]


class PackageCachesCleaner(EntryCleaner):
    """Removes download caches kept by language package managers.

    Each tool rebuilds its cache on the next install, so the only cost
    is re-downloading packages.
    """

    id = "package_caches"
    name = "Package Manager Caches"
    description = "Clean user package manager caches like pip, npm, cargo and yarn"
    sort_order = 50

    @property
    def unavailable_reason(self) -> str | None:
        if not any(path.is_dir() for _tool, path in _cache_locations()):
            return "No package manager caches found"
        return None

    def collect(self) -> list[FileEntry]:
        entries: list[FileEntry] = []
        for tool, path in _cache_locations():
            if not path.is_dir():
                continue
            entry = entry_for(path, f"{tool} cache")
            if entry is not None:
                entries.append(entry)
        return entries
