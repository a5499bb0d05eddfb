"""Cleaner for regenerable system-wide caches."""

from __future__ import annotations

from pathlib import Path

from cleansys.models.cleaner import CacheDirCleaner


class SystemCacheCleaner(CacheDirCleaner):
    """Empties the ldconfig, fontconfig and man page caches.

    All three are rebuilt on demand by the tools that own them.
    """

    id = "system_cache"
    name = "System Caches"
    description = "Clean system-wide cache directories (ldconfig, fontconfig, man)"
    requires_root = True
    sort_order = 40

    @property
    def _cache_dirs(self) -> tuple[Path, ...]:
        return (
            Path("/var/cache/ldconfig"),
            Path("/var/cache/fontconfig"),
            Path("/var/cache/man"),
        )
