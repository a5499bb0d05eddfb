"""Cleaner for stale files in /var/tmp."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from cleansys.models.cleaner import CacheDirCleaner

log = logging.getLogger(__name__)

_MAX_AGE = 7 * 86400  # seconds


class SystemTmpCleaner(CacheDirCleaner):
    """Removes entries in /var/tmp untouched for a week."""

    id = "system_tmp"
    name = "Temporary Files"
    description = "Clean system temporary files in /var/tmp older than 7 days"
    requires_root = True
    sort_order = 50

    @property
    def _cache_dirs(self) -> tuple[Path, ...]:
        return (Path("/var/tmp"),)

    def _skip(self, child: Path) -> bool:
        # systemd private tmp dirs belong to running services
        if child.name.startswith("systemd-private-"):
            return True
        try:
            return child.lstat().st_mtime > time.time() - _MAX_AGE
        except OSError:
            log.debug("Cannot access: %s", child)
            return True
