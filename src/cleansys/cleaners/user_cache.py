"""Cleaner for general application caches in ~/.cache."""

from __future__ import annotations

from pathlib import Path

from cleansys.models.cleaner import CacheDirCleaner
from cleansys.utils import xdg_cache_home

# Used by running desktop components; removing them causes visible glitches
_EXCLUDE_DIRS = {
    "fontconfig",
    "icon-cache.kcache",
    "gstreamer-1.0",
    "babl",
    "gegl-0.4",
}

# Handled by dedicated cleaners
_OWNED_DIRS = {
    "thumbnails",
    "mozilla",
    "chromium",
    "google-chrome",
    "BraveSoftware",
    "pip",
    "yarn",
    "cleansys",
}


class UserCacheCleaner(CacheDirCleaner):
    """Empties ~/.cache, leaving directories other cleaners own."""

    @property
    def id(self) -> str:
        return "user_cache"

    @property
    def name(self) -> str:
        return "Application Caches"

    @property
    def description(self) -> str:
        return "Clean application caches in ~/.cache"

    @property
    def sort_order(self) -> int:
        return 20

    @property
    def _cache_dirs(self) -> tuple[Path, ...]:
        return (xdg_cache_home(),)

    def _skip(self, child: Path) -> bool:
        return child.name in _EXCLUDE_DIRS or child.name in _OWNED_DIRS
