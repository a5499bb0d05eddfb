"""Cleaner for the freedesktop thumbnail cache."""

from __future__ import annotations

from pathlib import Path

from cleansys.models.cleaner import CacheDirCleaner
from cleansys.utils import xdg_cache_home


class ThumbnailsCleaner(CacheDirCleaner):
    """Cleans ~/.cache/thumbnails and the legacy ~/.thumbnails."""

    @property
    def id(self) -> str:
        return "thumbnails"

    @property
    def name(self) -> str:
        return "Thumbnail Caches"

    @property
    def description(self) -> str:
        return (
            "Removes cached thumbnail images. File managers and image viewers "
            "regenerate them when browsing directories."
        )

    @property
    def sort_order(self) -> int:
        return 30

    @property
    def _cache_dirs(self) -> tuple[Path, ...]:
        return (xdg_cache_home() / "thumbnails", Path.home() / ".thumbnails")
