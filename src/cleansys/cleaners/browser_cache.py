"""Cleaner for web browser caches."""

from __future__ import annotations

from pathlib import Path

from cleansys.models.cleaner import CacheDirCleaner
from cleansys.utils import xdg_cache_home

_BROWSER_DIRS = (
    "mozilla/firefox",
    "chromium",
    "google-chrome",
    "BraveSoftware",
)


class BrowserCacheCleaner(CacheDirCleaner):
    """Cleans Firefox and Chrome/Chromium HTTP caches."""

    @property
    def id(self) -> str:
        return "browser_cache"

    @property
    def name(self) -> str:
        return "Browser Caches"

    @property
    def description(self) -> str:
        return "Clean Firefox and Chrome/Chromium caches"

    @property
    def sort_order(self) -> int:
        return 10

    @property
    def _cache_dirs(self) -> tuple[Path, ...]:
        return tuple(xdg_cache_home() / d for d in _BROWSER_DIRS)
