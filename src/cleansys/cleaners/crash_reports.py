"""Cleaner for crash reports and core dumps."""

from __future__ import annotations

import logging
from pathlib import Path

from cleansys.models.cleaner import CacheDirCleaner

log = logging.getLogger(__name__)


class CrashReportsCleaner(CacheDirCleaner):
    """Removes apport crash reports and systemd core dumps."""

    id = "crash_reports"
    name = "Crash Reports"
    description = "Remove system crash reports and core dumps"
    requires_root = True
    sort_order = 60

    @property
    def _cache_dirs(self) -> tuple[Path, ...]:
        return (Path("/var/crash"), Path("/var/lib/systemd/coredump"))
