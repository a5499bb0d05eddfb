"""Cleaner for rotated log files in /var/log."""

from __future__ import annotations

import logging
from pathlib import Path

from cleansys.models.cleaner import EntryCleaner
from cleansys.models.entry import FileEntry

log = logging.getLogger(__name__)

_LOG_DIR = Path("/var/log")

_ROTATED_PATTERNS = (
    "*.log.[0-9]*",
    "*.[0-9].gz",
    "auth.log.[0-9]*",
    "kern.log.[0-9]*",
    "messages.[0-9]*",
    "syslog.[0-9]*",
)


class RotatedLogsCleaner(EntryCleaner):
    """Removes rotated syslog files (``*.1``, ``*.N.gz``) in /var/log.

    The live log files are kept intact.
    """

    id = "rotated_logs"
    name = "System Logs"
    description = "Clean old rotated system logs in /var/log"
    requires_root = True
    sort_order = 30

    @property
    def unavailable_reason(self) -> str | None:
        if not _LOG_DIR.is_dir():
            return "/var/log directory not found"
        return None

    def collect(self) -> list[FileEntry]:
        seen: set[Path] = set()
        entries: list[FileEntry] = []
        for pattern in _ROTATED_PATTERNS:
            try:
                matches = sorted(_LOG_DIR.rglob(pattern))
            except OSError:
                log.debug("Cannot glob %s in %s", pattern, _LOG_DIR)
                continue
            for path in matches:
                if path in seen:
                    continue
                seen.add(path)
                try:
                    if not path.is_file():
                        continue
                    size = path.stat().st_size
                except OSError:
                    log.debug("Cannot access: %s", path)
                    continue
                if size > 0:
                    entries.append(FileEntry(path=path, size_bytes=size, description=f"Rotated log: {path.name}"))
        return entries
