"""Cleaner for user-owned temp files in /tmp."""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path

from cleansys.models.cleaner import EntryCleaner
from cleansys.models.entry import FileEntry
from cleansys.utils import entry_for

log = logging.getLogger(__name__)

_ONE_DAY = 86400  # seconds

_TMP_DIR = Path("/tmp")


class TmpFilesCleaner(EntryCleaner):
    """Removes user-owned files in /tmp that are older than 1 day."""

    @property
    def id(self) -> str:
        return "tmp_files"

    @property
    def name(self) -> str:
        return "Temporary Files"

    @property
    def description(self) -> str:
        return "Clean temporary files in /tmp owned by the user and older than 1 day"

    @property
    def sort_order(self) -> int:
        return 40

    def collect(self) -> list[FileEntry]:
        entries: list[FileEntry] = []
        uid = os.getuid()
        cutoff = time.time() - _ONE_DAY

        try:
            items = sorted(_TMP_DIR.iterdir())
        except OSError:
            log.debug("Cannot read %s", _TMP_DIR)
            return entries

        for item in items:
            try:
                stat = item.lstat()
            except OSError:
                log.debug("Cannot access: %s", item)
                continue
            if stat.st_uid != uid or stat.st_mtime > cutoff:
                continue
            entry = entry_for(item, f"Temp: {item.name}")
            if entry is not None:
                entries.append(entry)
        return entries
